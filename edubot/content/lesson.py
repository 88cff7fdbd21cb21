"""
EduBot Lessons — Lesson Content Model

Lesson and Topic are read-only content. Progress through a lesson is NOT
stored here; it lives in SessionProgress, so one Lesson object
can back any number of conversations.

JSON shape (one lesson per file):
    {
        "lesson_title": "...",          # required
        "topics": [ {topic}, ... ]      # required, order = progression
    }
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class LessonFormatError(ValueError):
    """Lesson content is missing a required key or has the wrong shape."""


# JSON key → Topic attribute
_TOPIC_FIELDS = {
    "question": "question",
    "image_url": "image_url",
    "answer_options": "answer_options",
    "correct_answer": "correct_answer",
    "correct_answer_bot_response": "correct_answer_response",
    "wrong_answer_bot_response": "wrong_answer_response",
    "pronunciation_phrase": "pronunciation_phrase",
    "next_topic_phrase": "next_topic_phrase",
    "stay_on_current_topic_phrase": "stay_on_topic_phrase",
}


@dataclass(frozen=True)
class Topic:
    """One question/answer unit within a lesson."""
    question: str
    image_url: str
    answer_options: Tuple[str, ...]
    correct_answer: str
    correct_answer_response: str
    wrong_answer_response: str
    pronunciation_phrase: str
    next_topic_phrase: str
    stay_on_topic_phrase: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Topic":
        if not isinstance(data, dict):
            raise LessonFormatError(f"Topic must be an object, got {type(data).__name__}")

        missing = [key for key in _TOPIC_FIELDS if key not in data]
        if missing:
            raise LessonFormatError(f"Topic missing required fields: {missing}")

        not_text = [
            key for key in _TOPIC_FIELDS
            if key != "answer_options" and not isinstance(data[key], str)
        ]
        if not_text:
            raise LessonFormatError(f"Topic fields must be strings: {not_text}")

        options = data["answer_options"]
        if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
            raise LessonFormatError("answer_options must be a list of strings")

        # Set semantics, presentation order preserved
        unique_options = tuple(dict.fromkeys(options))

        kwargs = {attr: data[key] for key, attr in _TOPIC_FIELDS.items()}
        kwargs["answer_options"] = unique_options
        topic = cls(**kwargs)

        if not any(o.casefold() == topic.correct_answer.casefold() for o in unique_options):
            logger.warning(
                f"Topic '{topic.question[:40]}': correct_answer "
                f"'{topic.correct_answer}' is not among the answer options"
            )
        return topic

    def to_dict(self) -> Dict[str, Any]:
        data = {key: getattr(self, attr) for key, attr in _TOPIC_FIELDS.items()}
        data["answer_options"] = list(self.answer_options)
        return data


@dataclass(frozen=True)
class Lesson:
    """An ordered sequence of topics under a title."""
    lesson_id: str
    title: str
    topics: Tuple[Topic, ...] = field(default_factory=tuple)

    def topic_at(self, index: int) -> Optional[Topic]:
        """Topic at index, or None when the index is out of range."""
        if 0 <= index < len(self.topics):
            return self.topics[index]
        return None

    def is_last(self, index: int) -> bool:
        return index >= len(self.topics) - 1

    @classmethod
    def from_dict(cls, lesson_id: str, data: Dict[str, Any]) -> "Lesson":
        if not isinstance(data, dict):
            raise LessonFormatError(f"Lesson '{lesson_id}' must be an object")
        if "lesson_title" not in data:
            raise LessonFormatError(f"Lesson '{lesson_id}' missing 'lesson_title'")
        if not isinstance(data["lesson_title"], str):
            raise LessonFormatError(f"Lesson '{lesson_id}' 'lesson_title' must be a string")
        if "topics" not in data or not isinstance(data["topics"], list):
            raise LessonFormatError(f"Lesson '{lesson_id}' missing 'topics' list")

        topics: List[Topic] = [Topic.from_dict(t) for t in data["topics"]]
        return cls(lesson_id=lesson_id, title=data["lesson_title"], topics=tuple(topics))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lesson_title": self.title,
            "topics": [t.to_dict() for t in self.topics],
        }
