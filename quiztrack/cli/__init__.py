"""Terminal front end for quiztrack."""
