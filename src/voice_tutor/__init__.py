"""Voice Tutor: phone tutoring calls backed by textbook retrieval."""

__version__ = "0.1.0"
