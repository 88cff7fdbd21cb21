"""
EduBot Lessons — Chat Router
Free-text messages outside a lesson turn: knowledge base first, intent
fallback second.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from edubot.config import DEFAULT_CHAT_CONTEXT
from edubot.qna.router import MessageRouter, get_message_router
from edubot.transport import TurnRecorder

router = APIRouter(prefix="/api/chat", tags=["chat"])


class ChatRequest(BaseModel):
    text: str
    context: Optional[str] = None

class ChatResponse(BaseModel):
    handled_by: str  # "qna" | "intent"
    messages: List[Dict[str, Any]]


@router.post("/message", response_model=ChatResponse)
async def message(req: ChatRequest, message_router: MessageRouter = Depends(get_message_router)):
    recorder = TurnRecorder()
    handled_by = await message_router.handle(req.text, recorder, req.context or DEFAULT_CHAT_CONTEXT)
    return ChatResponse(handled_by=handled_by, messages=recorder.to_list())
