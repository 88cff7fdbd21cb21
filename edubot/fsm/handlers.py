"""
EduBot Lessons — State Handlers

One function per state. Each handler receives:
    - session: SessionProgress
    - lesson: Lesson the session belongs to
    - message: InboundMessage (student's input)
    - transport: where output goes

Each handler returns:
    - new_state: LessonState
    - session_updates: dict (fields to update in session)

Handlers never raise for content problems. A missing topic (index out of
range) makes the step a silent no-op: no message, no state change.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from edubot.config import (
    END_OF_TOPIC_PROMPT, END_OF_TOPIC_RETRY, LESSON_COMPLETE_MESSAGE,
    MAX_CONTINUATION_ATTEMPTS, NO_MORE_LESSONS_MESSAGE,
)
from edubot.content.lesson import Lesson, Topic
from edubot.fsm.choice_prompt import ChoiceOutcome, ChoicePrompt
from edubot.fsm.transitions import get_transition
from edubot.state.session import LessonState, SessionProgress
from edubot.transport import InboundMessage, TopicCard, Transport
from edubot.tutor.answer_evaluator import StudentResponse, is_correct

logger = logging.getLogger("edubot.fsm.handlers")

HandlerResult = Tuple[LessonState, Dict[str, Any]]


# ─── Shared Steps ────────────────────────────────────────────────────────────

def _current_topic(session: SessionProgress, lesson: Lesson) -> Optional[Topic]:
    topic = lesson.topic_at(session.current_topic_index)
    if topic is None:
        logger.warning(
            f"No topic at index {session.current_topic_index} in lesson "
            f"'{lesson.lesson_id}' (state {session.current_state.value}), ignoring input"
        )
    return topic


def continuation_prompt(topic: Topic) -> ChoicePrompt:
    """The end-of-topic question: go on, or hear it again."""
    return ChoicePrompt(
        choices=(topic.next_topic_phrase, topic.stay_on_topic_phrase),
        prompt=END_OF_TOPIC_PROMPT,
        retry_prompt=END_OF_TOPIC_RETRY,
        max_attempts=MAX_CONTINUATION_ATTEMPTS,
    )


async def pronounce(topic: Topic, transport: Transport) -> None:
    """Pronunciation step: the phrase, then speech of the correct answer."""
    await transport.post_text(topic.pronunciation_phrase)
    await transport.say(topic.correct_answer, topic.correct_answer)


async def present_topic(session: SessionProgress, lesson: Lesson, transport: Transport) -> HandlerResult:
    """
    Entry step. Show the topic at the current index as a card.

    Past the last topic the lesson is exhausted.
    """
    topic = lesson.topic_at(session.current_topic_index)
    if topic is None:
        await transport.post_text(NO_MORE_LESSONS_MESSAGE)
        return LessonState.EXHAUSTED, {}

    await transport.post_card(TopicCard(
        question=topic.question,
        image_url=topic.image_url,
        choices=topic.answer_options,
    ))
    return LessonState.AWAITING_CHOICE_ANSWER, {}


# ─── State Handlers ──────────────────────────────────────────────────────────

async def handle_presenting(
    session: SessionProgress,
    lesson: Lesson,
    message: InboundMessage,
    transport: Transport,
) -> HandlerResult:
    """A context parked in PRESENTING shows its topic on the next turn."""
    return await present_topic(session, lesson, transport)


async def handle_choice_answer(
    session: SessionProgress,
    lesson: Lesson,
    message: InboundMessage,
    transport: Transport,
) -> HandlerResult:
    """
    Handle the answer-card submission.

    - CORRECT → feedback, then wait for the typed answer
    - WRONG (or no answer in the payload) → feedback, present topic again
    """
    topic = _current_topic(session, lesson)
    if topic is None:
        return session.current_state, {}

    response = StudentResponse.from_payload(message.value)
    event = "CORRECT" if is_correct(response, topic) else "WRONG"
    transition = get_transition(LessonState.AWAITING_CHOICE_ANSWER, event)

    if transition.action == "confirm_choice":
        await transport.post_text(topic.correct_answer_response)
    else:
        await transport.post_text(topic.wrong_answer_response)
    return transition.next_state, {}


async def handle_typed_answer(
    session: SessionProgress,
    lesson: Lesson,
    message: InboundMessage,
    transport: Transport,
) -> HandlerResult:
    """
    Handle the free-typed answer.

    - CORRECT → pronunciation step, then the end-of-topic choice
    - WRONG → feedback, present topic again
    """
    topic = _current_topic(session, lesson)
    if topic is None:
        return session.current_state, {}

    response = StudentResponse.from_text(message.text)
    event = "CORRECT" if is_correct(response, topic) else "WRONG"
    transition = get_transition(LessonState.AWAITING_TYPED_ANSWER, event)

    if transition.action == "pronounce":
        await pronounce(topic, transport)
        await continuation_prompt(topic).ask(transport)
    else:
        await transport.post_text(topic.wrong_answer_response)
    return transition.next_state, {}


async def handle_continuation_choice(
    session: SessionProgress,
    lesson: Lesson,
    message: InboundMessage,
    transport: Transport,
) -> HandlerResult:
    """
    Handle the end-of-topic choice.

    - NEXT → next topic, or COMPLETED after the last one
    - STAY → pronunciation again, ask again with a fresh attempt budget
    - Anything else → re-prompt until attempts run out, then restart the topic
    """
    topic = _current_topic(session, lesson)
    if topic is None:
        return session.current_state, {}

    prompt = continuation_prompt(topic)
    result = await prompt.receive(message.text, session.choice_attempts, transport)

    if result.outcome == ChoiceOutcome.MATCHED:
        event = "NEXT" if result.choice == topic.next_topic_phrase else "STAY"
    elif result.outcome == ChoiceOutcome.RETRY:
        event = "UNRECOGNIZED"
    else:
        event = "EXHAUSTED"

    transition = get_transition(LessonState.AWAITING_CONTINUATION_CHOICE, event)

    if transition.action == "advance_topic":
        if lesson.is_last(session.current_topic_index):
            await transport.post_text(LESSON_COMPLETE_MESSAGE)
            return LessonState.COMPLETED, {}
        return transition.next_state, {"current_topic_index": session.current_topic_index + 1}

    if transition.action == "pronounce":
        await pronounce(topic, transport)
        await prompt.ask(transport)
        return transition.next_state, {"choice_attempts": 0}

    if transition.action == "reprompt":
        return transition.next_state, {"choice_attempts": result.attempts_used}

    # restart_topic
    return transition.next_state, {}


async def handle_finished(
    session: SessionProgress,
    lesson: Lesson,
    message: InboundMessage,
    transport: Transport,
) -> HandlerResult:
    """COMPLETED / EXHAUSTED (terminal). Input is ignored."""
    logger.info(f"Lesson '{lesson.lesson_id}' already {session.current_state.value}, ignoring input")
    return session.current_state, {}


# ─── Main Handler Dispatcher ─────────────────────────────────────────────────

HANDLERS = {
    LessonState.PRESENTING: handle_presenting,
    LessonState.AWAITING_CHOICE_ANSWER: handle_choice_answer,
    LessonState.AWAITING_TYPED_ANSWER: handle_typed_answer,
    LessonState.AWAITING_CONTINUATION_CHOICE: handle_continuation_choice,
    LessonState.COMPLETED: handle_finished,
    LessonState.EXHAUSTED: handle_finished,
}


def _apply(session: SessionProgress, new_state: LessonState, updates: Dict[str, Any]) -> None:
    if new_state != session.current_state:
        logger.info(
            f"Lesson '{session.lesson_id}' topic {session.current_topic_index}: "
            f"{session.current_state.value} → {new_state.value}"
        )
        session.transition_to(new_state)
    for key, value in updates.items():
        setattr(session, key, value)


async def start_lesson(lesson: Lesson, transport: Transport) -> SessionProgress:
    """Begin a conversation on a lesson: fresh progress, first topic shown."""
    session = SessionProgress(lesson_id=lesson.lesson_id)
    new_state, updates = await present_topic(session, lesson, transport)
    _apply(session, new_state, updates)
    return session


async def handle_state(
    session: SessionProgress,
    lesson: Lesson,
    message: InboundMessage,
    transport: Transport,
) -> SessionProgress:
    """
    Main entry point for a resumed turn.

    Dispatches to the handler for session.current_state. A transition into
    PRESENTING is followed by the entry step in the same turn.
    """
    if session.lesson_id != lesson.lesson_id:
        raise ValueError(f"Session is for lesson '{session.lesson_id}', got '{lesson.lesson_id}'")

    session.turn_count += 1
    handler = HANDLERS[session.current_state]
    new_state, updates = await handler(session, lesson, message, transport)
    _apply(session, new_state, updates)

    if session.current_state == LessonState.PRESENTING:
        new_state, updates = await present_topic(session, lesson, transport)
        _apply(session, new_state, updates)

    return session


resume_lesson = handle_state
