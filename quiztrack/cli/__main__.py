"""
Entry point for running quiztrack as a module.

Usage:
    python -m quiztrack.cli take questions.json
    python -m quiztrack.cli --help
"""
from .main import run

if __name__ == "__main__":
    run()
