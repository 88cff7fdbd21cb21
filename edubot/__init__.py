"""EduBot Lessons — lesson-driven tutoring dialogs with a QnA fallback router."""

__version__ = "1.0.0"
