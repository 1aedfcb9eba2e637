"""
Setup script for study-cadence.

Cadence is the scheduling core of a study app. It serves three roles:

1. Review Scheduler - spaced repetition intervals from 1-5 self-ratings
2. Session Planner - interleaved, topic-balanced practice sequences
3. Coach - per-topic performance metrics and practice recommendations

Persistence is delegated to a small key-value store interface.
"""

from setuptools import find_packages, setup

setup(
    name="study-cadence",
    version="1.0.0",
    description="Spaced repetition and interleaved practice scheduling engine",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Cadence Contributors",
    packages=find_packages(include=["cadence", "cadence.*"]),
    python_requires=">=3.11",
    install_requires=[
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition interleaving education scheduling",
)
