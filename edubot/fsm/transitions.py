"""
EduBot Lessons — State × Event Transition Matrix

Each waiting state accepts a fixed set of events (decided by its handler from
the inbound message). Every (state, event) pair a handler can produce is
defined below. Anything else resolves to a no-op that keeps the state.

PRESENTING is transient: a transition into it means "show the topic at the
current index again", which the dispatcher runs within the same turn.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from edubot.state.session import LessonState


# ─── Events (produced by handlers) ───────────────────────────────────────────

INPUT_EVENTS = frozenset({
    "CORRECT",        # Answer matches topic.correct_answer
    "WRONG",          # Answer absent or not matching
    "NEXT",           # next_topic_phrase selected
    "STAY",           # stay_on_topic_phrase selected
    "UNRECOGNIZED",   # Continuation input matched no choice, attempts remain
    "EXHAUSTED",      # Continuation attempts used up
    "ANY",            # States that do not inspect the input
})

STATE_EVENTS: Dict[LessonState, FrozenSet[str]] = {
    LessonState.PRESENTING: frozenset({"ANY"}),
    LessonState.AWAITING_CHOICE_ANSWER: frozenset({"CORRECT", "WRONG"}),
    LessonState.AWAITING_TYPED_ANSWER: frozenset({"CORRECT", "WRONG"}),
    LessonState.AWAITING_CONTINUATION_CHOICE: frozenset({"NEXT", "STAY", "UNRECOGNIZED", "EXHAUSTED"}),
    LessonState.COMPLETED: frozenset({"ANY"}),
    LessonState.EXHAUSTED: frozenset({"ANY"}),
}


@dataclass(frozen=True)
class TransitionResult:
    """
    Result of a state transition lookup.

    next_state: Where to go next (handler may override, e.g. last topic → COMPLETED)
    action: What the handler should do
    """
    next_state: LessonState
    action: str


# ─── The Transition Matrix ───────────────────────────────────────────────────

TRANSITIONS: Dict[Tuple[LessonState, str], TransitionResult] = {
    (LessonState.PRESENTING, "ANY"): TransitionResult(
        next_state=LessonState.PRESENTING,
        action="present_topic",
    ),

    (LessonState.AWAITING_CHOICE_ANSWER, "CORRECT"): TransitionResult(
        next_state=LessonState.AWAITING_TYPED_ANSWER,
        action="confirm_choice",
    ),
    (LessonState.AWAITING_CHOICE_ANSWER, "WRONG"): TransitionResult(
        next_state=LessonState.PRESENTING,
        action="restart_topic",
    ),

    (LessonState.AWAITING_TYPED_ANSWER, "CORRECT"): TransitionResult(
        next_state=LessonState.AWAITING_CONTINUATION_CHOICE,
        action="pronounce",
    ),
    (LessonState.AWAITING_TYPED_ANSWER, "WRONG"): TransitionResult(
        next_state=LessonState.PRESENTING,
        action="restart_topic",
    ),

    (LessonState.AWAITING_CONTINUATION_CHOICE, "NEXT"): TransitionResult(
        next_state=LessonState.PRESENTING,  # COMPLETED if this was the last topic
        action="advance_topic",
    ),
    (LessonState.AWAITING_CONTINUATION_CHOICE, "STAY"): TransitionResult(
        next_state=LessonState.AWAITING_CONTINUATION_CHOICE,
        action="pronounce",
    ),
    (LessonState.AWAITING_CONTINUATION_CHOICE, "UNRECOGNIZED"): TransitionResult(
        next_state=LessonState.AWAITING_CONTINUATION_CHOICE,
        action="reprompt",
    ),
    (LessonState.AWAITING_CONTINUATION_CHOICE, "EXHAUSTED"): TransitionResult(
        next_state=LessonState.PRESENTING,
        action="restart_topic",
    ),

    (LessonState.COMPLETED, "ANY"): TransitionResult(
        next_state=LessonState.COMPLETED,
        action="ignore",
    ),
    (LessonState.EXHAUSTED, "ANY"): TransitionResult(
        next_state=LessonState.EXHAUSTED,
        action="ignore",
    ),
}


def get_transition(state: LessonState, event: str) -> TransitionResult:
    """
    Get the transition result for a state × event combination.

    Unknown combinations resolve to a no-op in the same state.
    """
    if isinstance(state, str):
        state = LessonState(state)

    key = (state, event.upper())
    if key in TRANSITIONS:
        return TRANSITIONS[key]

    return TransitionResult(next_state=state, action="ignore")


def validate_matrix_completeness() -> bool:
    """
    Verify every event a state can produce has a transition.

    Returns True if complete, raises AssertionError if not.
    """
    missing = [
        (state.value, event)
        for state in LessonState
        for event in STATE_EVENTS.get(state, frozenset())
        if (state, event) not in TRANSITIONS
    ]
    if missing:
        raise AssertionError(f"Missing transitions: {missing}")

    undeclared = [k for k in TRANSITIONS if k[1] not in STATE_EVENTS.get(k[0], frozenset())]
    if undeclared:
        raise AssertionError(f"Transitions for undeclared events: {undeclared}")

    return True
