"""
EduBot Lessons — Session Progress Schema

Every conversation has ONE progress object. Handlers read from it and write
to it. It is the only state that survives between turns, and it must stay a
plain value: the host stores to_dict() and hands it back on the next turn.

Persistence Rules:
- current_topic_index: Changes ONLY on a successful "next topic" choice.
- choice_attempts: Unrecognized continuation inputs so far. Resets whenever
  the state changes or the continuation prompt is asked again.
- current_state: Tag of the handler that owns the next inbound message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LessonState(str, Enum):
    """Six states. PRESENTING is transient, the last two are terminal."""
    PRESENTING = "PRESENTING"
    AWAITING_CHOICE_ANSWER = "AWAITING_CHOICE_ANSWER"
    AWAITING_TYPED_ANSWER = "AWAITING_TYPED_ANSWER"
    AWAITING_CONTINUATION_CHOICE = "AWAITING_CONTINUATION_CHOICE"
    COMPLETED = "COMPLETED"
    EXHAUSTED = "EXHAUSTED"


TERMINAL_STATES = frozenset({LessonState.COMPLETED, LessonState.EXHAUSTED})

# Input shape each waiting state expects from the client
EXPECTED_INPUT = {
    LessonState.AWAITING_CHOICE_ANSWER: "choice",
    LessonState.AWAITING_TYPED_ANSWER: "text",
    LessonState.AWAITING_CONTINUATION_CHOICE: "choice",
}


@dataclass
class SessionProgress:
    """
    Session Progress Context for one lesson conversation.

    Contains only primitives so it round-trips through JSON unchanged.
    """
    lesson_id: str
    current_topic_index: int = 0
    current_state: LessonState = LessonState.PRESENTING
    previous_state: Optional[LessonState] = None
    choice_attempts: int = 0
    turn_count: int = 0

    @property
    def is_finished(self) -> bool:
        return self.current_state in TERMINAL_STATES

    @property
    def expects(self) -> Optional[str]:
        """'choice', 'text', or None when no input is awaited."""
        return EXPECTED_INPUT.get(self.current_state)

    def transition_to(self, new_state: LessonState) -> None:
        """
        Transition to a new state.

        - Saves previous_state
        - Resets choice_attempts
        """
        self.previous_state = self.current_state
        self.current_state = new_state
        self.choice_attempts = 0

    def to_dict(self) -> dict:
        """Serialize to dictionary for storage by the host."""
        return {
            "lesson_id": self.lesson_id,
            "current_topic_index": self.current_topic_index,
            "current_state": self.current_state.value,
            "previous_state": self.previous_state.value if self.previous_state else None,
            "choice_attempts": self.choice_attempts,
            "turn_count": self.turn_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionProgress":
        """
        Deserialize from dictionary.

        Raises ValueError when the data is not a valid progress context.
        """
        if not isinstance(data, dict) or not isinstance(data.get("lesson_id"), str):
            raise ValueError("Progress context requires a string 'lesson_id'")

        index = data.get("current_topic_index", 0)
        attempts = data.get("choice_attempts", 0)
        turns = data.get("turn_count", 0)
        for name, value in (("current_topic_index", index), ("choice_attempts", attempts), ("turn_count", turns)):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"'{name}' must be a non-negative integer, got {value!r}")

        state = cls(lesson_id=data["lesson_id"])
        state.current_topic_index = index
        state.choice_attempts = attempts
        state.turn_count = turns
        if data.get("current_state"):
            state.current_state = LessonState(data["current_state"])
        if data.get("previous_state"):
            state.previous_state = LessonState(data["previous_state"])
        return state
