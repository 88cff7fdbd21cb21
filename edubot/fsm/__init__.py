"""
EduBot Lessons — FSM Package

Lesson progression state machine and the bounded-retry choice prompt.
"""
from edubot.fsm.transitions import TRANSITIONS, TransitionResult, get_transition
from edubot.fsm.handlers import handle_state, resume_lesson, start_lesson

__all__ = [
    "TRANSITIONS", "TransitionResult", "get_transition",
    "handle_state", "resume_lesson", "start_lesson",
]
