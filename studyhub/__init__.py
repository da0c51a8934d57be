"""StudyHub: summaries, quizzes and flashcards from uploaded study material."""

__version__ = "1.0.0"
