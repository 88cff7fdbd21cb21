"""
EduBot Lessons — Answer Evaluator

Deterministic comparison of a student's answer with the topic's expected
answer. No I/O, no LLM. Extraction of the answer from the inbound message is
a typed parse that yields None when nothing usable was sent.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from edubot.content.lesson import Topic

logger = logging.getLogger("edubot.answer_evaluator")


@dataclass(frozen=True)
class StudentResponse:
    answer: str

    @classmethod
    def from_payload(cls, value: Any) -> Optional["StudentResponse"]:
        """
        Parse a submit-action payload such as {"answer": "Paris"}.

        Returns None for anything that does not carry a string answer.
        """
        if not isinstance(value, dict):
            return None
        answer = value.get("answer")
        if not isinstance(answer, str):
            return None
        return cls(answer=answer)

    @classmethod
    def from_text(cls, text: Optional[str]) -> Optional["StudentResponse"]:
        """Literal free-text answer. None when no text was sent."""
        if text is None:
            return None
        return cls(answer=text)


def answers_match(given: str, expected: str) -> bool:
    """Case-insensitive, locale-independent equality."""
    return given.casefold() == expected.casefold()


def is_correct(response: Optional[StudentResponse], topic: Topic) -> bool:
    """True iff a response is present and matches topic.correct_answer."""
    if response is None:
        return False
    result = answers_match(response.answer, topic.correct_answer)
    logger.debug(f"Answer eval: '{response.answer[:40]}' vs '{topic.correct_answer}' -> {result}")
    return result
