"""
EduBot Lessons — Lesson Router
Stateless turn endpoint. The client holds the progress context and sends it
back with every message; nothing is stored server-side.

start → card for topic 0
turn  → context + answer/choice → outputs + next context
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from edubot.content.lesson import Lesson
from edubot.content.loader import LessonLibrary, get_lesson_library
from edubot.fsm.handlers import handle_state, start_lesson
from edubot.state.session import SessionProgress
from edubot.transport import InboundMessage, TurnRecorder

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["lesson"])


# ─── Request/Response Models ─────────────────────────────────────────────────

class LessonSummary(BaseModel):
    lesson_id: str
    title: str
    topic_count: int

class LessonListResponse(BaseModel):
    lessons: List[LessonSummary]

class StartRequest(BaseModel):
    lesson_id: str

class TurnRequest(BaseModel):
    context: Dict[str, Any]
    text: Optional[str] = None
    value: Optional[Any] = None  # Submit-action payload, e.g. {"answer": "Paris"}

class TurnResponse(BaseModel):
    context: Dict[str, Any]
    messages: List[Dict[str, Any]]
    state: str
    expects: Optional[str] = None
    finished: bool = False


def _get_lesson(library: LessonLibrary, lesson_id: str) -> Lesson:
    lesson = library.get(lesson_id)
    if lesson is None:
        raise HTTPException(404, f"Lesson '{lesson_id}' not found")
    return lesson


def _turn_response(session: SessionProgress, recorder: TurnRecorder) -> TurnResponse:
    return TurnResponse(
        context=session.to_dict(),
        messages=recorder.to_list(),
        state=session.current_state.value,
        expects=session.expects,
        finished=session.is_finished,
    )


# ─── Endpoints ───────────────────────────────────────────────────────────────

@router.get("/lessons", response_model=LessonListResponse)
def list_lessons(library: LessonLibrary = Depends(get_lesson_library)):
    return LessonListResponse(lessons=[
        LessonSummary(lesson_id=l.lesson_id, title=l.title, topic_count=len(l.topics))
        for l in library.list_lessons()
    ])


@router.post("/lesson/start", response_model=TurnResponse)
async def start(req: StartRequest, library: LessonLibrary = Depends(get_lesson_library)):
    lesson = _get_lesson(library, req.lesson_id)
    recorder = TurnRecorder()
    session = await start_lesson(lesson, recorder)
    logger.info(f"Lesson '{lesson.lesson_id}' started, state={session.current_state.value}")
    return _turn_response(session, recorder)


@router.post("/lesson/turn", response_model=TurnResponse)
async def turn(req: TurnRequest, library: LessonLibrary = Depends(get_lesson_library)):
    try:
        session = SessionProgress.from_dict(req.context)
    except ValueError as e:
        raise HTTPException(422, f"Invalid lesson context: {e}")

    lesson = _get_lesson(library, session.lesson_id)
    recorder = TurnRecorder()
    message = InboundMessage(text=req.text, value=req.value)
    session = await handle_state(session, lesson, message, recorder)
    return _turn_response(session, recorder)
