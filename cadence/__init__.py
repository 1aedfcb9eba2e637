"""
Cadence - study scheduling engine.

Decides when learned items come back for review (spaced repetition), in what
order topics are practised in one sitting (interleaving), and how that
practice went.
"""

from cadence.study import (
    InterleavingEngine,
    ReviewScheduler,
    ReviewService,
    SessionManager,
    TopicGroup,
)

__version__ = "1.0.0"

__all__ = [
    "InterleavingEngine",
    "ReviewScheduler",
    "ReviewService",
    "SessionManager",
    "TopicGroup",
    "__version__",
]
