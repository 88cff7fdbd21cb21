"""
EduBot Lessons — Confidence-Gated Message Router

Free-text messages that no lesson step is waiting for come here.

    knowledge source for context?  no  → unhandled
    query → score > QNA_THRESHOLD      → post answer, handled
    score <= threshold / QnaServiceError → unhandled (fallback runs)

Lookup failures never propagate: the router fails open to the fallback.
"""

import logging
from typing import Awaitable, Callable, Mapping, Optional

from edubot.config import DEFAULT_CHAT_CONTEXT, QNA_THRESHOLD
from edubot.qna.service import KnowledgeSource, QnaResult, QnaServiceError
from edubot.transport import Transport

logger = logging.getLogger(__name__)

FallbackHandler = Callable[[str, Transport], Awaitable[object]]


class ConfidenceGatedRouter:
    """
    Args:
        knowledge_sources: context id → knowledge source. A context with no
            entry routes every message straight to the fallback.
        threshold: minimum score, exclusive.
    """

    def __init__(
        self,
        knowledge_sources: Optional[Mapping[str, KnowledgeSource]] = None,
        threshold: float = QNA_THRESHOLD,
    ):
        self._sources = dict(knowledge_sources or {})
        self.threshold = threshold

    def source_for(self, context: str) -> Optional[KnowledgeSource]:
        return self._sources.get(context)

    async def route(self, text: str, transport: Transport, context: str = DEFAULT_CHAT_CONTEXT) -> bool:
        """Answer from the knowledge base if confident. Returns True when handled."""
        source = self.source_for(context)
        if source is None:
            return False

        try:
            result = await source.query(text)
        except QnaServiceError as e:
            logger.warning(f"Knowledge lookup failed for context '{context}', falling back: {e}")
            return False

        if result.score > self.threshold:
            await self.answer(result, transport)
            return True

        logger.info(f"Knowledge score {result.score} <= {self.threshold} for context '{context}'")
        return False

    async def answer(self, result: QnaResult, transport: Transport) -> None:
        await transport.post_text(result.answer)

    async def aclose(self) -> None:
        """Close every knowledge source that holds a connection pool."""
        for context, source in self._sources.items():
            close = getattr(source, "aclose", None)
            if close is not None:
                logger.info(f"Closing knowledge source for context '{context}'")
                await close()


class MessageRouter:
    """Knowledge lookup first, then the fallback handler."""

    def __init__(self, router: ConfidenceGatedRouter, fallback: FallbackHandler):
        self.router = router
        self.fallback = fallback

    async def handle(self, text: str, transport: Transport, context: str = DEFAULT_CHAT_CONTEXT) -> str:
        """Returns which path handled the message: 'qna' or 'intent'."""
        if await self.router.route(text, transport, context):
            return "qna"
        await self.fallback(text, transport)
        return "intent"

    async def aclose(self) -> None:
        await self.router.aclose()


_instance: Optional[MessageRouter] = None


def get_message_router() -> MessageRouter:
    """Build the configured router (singleton)."""
    global _instance
    if _instance is None:
        from openai import AsyncOpenAI
        from edubot.config import OPENAI_API_KEY, QNA_ENDPOINT
        from edubot.qna.intent import IntentClassifier
        from edubot.qna.service import QnaService

        sources = {}
        if QNA_ENDPOINT:
            sources[DEFAULT_CHAT_CONTEXT] = QnaService()
        else:
            logger.warning("QNA_ENDPOINT not set, knowledge lookup disabled")

        client = AsyncOpenAI(api_key=OPENAI_API_KEY) if OPENAI_API_KEY else None
        classifier = IntentClassifier(client=client)
        _instance = MessageRouter(ConfidenceGatedRouter(sources), classifier.handle)
    return _instance


async def close_message_router() -> None:
    """Release the singleton's HTTP clients. No-op if it was never built."""
    global _instance
    if _instance is not None:
        await _instance.aclose()
        _instance = None
