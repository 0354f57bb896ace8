"""
Setup script for quiztrack.

quiztrack tracks a learner's progress through a fixed set of quiz
questions. It serves three roles:

1. Quiz Core - Questions, answer tracking, scoring against a pass threshold
2. Save/Resume - In-progress answers persisted after every change
3. Terminal Front End - Take and inspect quizzes from the command line

The 'quiztrack' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="quiztrack",
    version="1.0.0",
    description="Quiz progress tracking, scoring and resumable sessions",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["quiztrack", "quiztrack.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
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
    entry_points={
        "console_scripts": [
            "quiztrack=quiztrack.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Testing",
    ],
    keywords="quiz scoring education cli",
)
