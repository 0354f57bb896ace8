"""
quiztrack - quiz progress tracking, scoring and resumable sessions.

The core lives in ``quiztrack.quiz``; ``quiztrack.cli`` is a terminal
front end built on top of it.
"""

__version__ = "1.0.0"
