"""
Tests for the knowledge-base client and the confidence-gated router.
"""

import json
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from edubot.qna.router import ConfidenceGatedRouter, MessageRouter
from edubot.qna.service import QnaResult, QnaService, QnaServiceError, parse_answer
from edubot.transport import TurnRecorder


def make_service(handler) -> QnaService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return QnaService(
        endpoint="https://kb.example.org/qnamaker/",
        knowledge_base_id="kb-1",
        endpoint_key="secret",
        client=client,
    )


def source_returning(score: float, answer: str = "Paris is the capital of France.") -> AsyncMock:
    source = AsyncMock()
    source.query.return_value = QnaResult(answer=answer, questions=("capital of france?",), score=score)
    return source


# ─── QnaService ──────────────────────────────────────────────────────────────

@pytest.mark.asyncio
class TestQnaService:
    async def test_posts_question_and_parses_top_answer(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"answers": [
                {"answer": "Paris", "questions": ["capital of france"], "score": 92.5},
                {"answer": "Lyon", "questions": [], "score": 10},
            ]})

        result = await make_service(handler).query("what is the capital of france")

        assert seen["url"] == "https://kb.example.org/qnamaker/knowledgebases/kb-1/generateAnswer"
        assert seen["auth"] == "EndpointKey secret"
        assert seen["body"] == {"question": "what is the capital of france", "top": 1}
        assert result == QnaResult(answer="Paris", questions=("capital of france",), score=92.5)

    async def test_no_answers_scores_zero(self):
        service = make_service(lambda request: httpx.Response(200, json={"answers": []}))
        result = await service.query("hm")
        assert result.score == 0
        assert result.answer == ""

    async def test_http_error_status_raises(self):
        service = make_service(lambda request: httpx.Response(503, text="down"))
        with pytest.raises(QnaServiceError):
            await service.query("hello")

    async def test_connection_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(QnaServiceError):
            await make_service(handler).query("hello")

    async def test_invalid_json_raises(self):
        service = make_service(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(QnaServiceError):
            await service.query("hello")


def test_parse_answer_rejects_bad_body():
    with pytest.raises(QnaServiceError):
        parse_answer({"answers": "nope"})
    with pytest.raises(QnaServiceError):
        parse_answer({"answers": [{"answer": "x", "score": "high"}]})


# ─── ConfidenceGatedRouter ───────────────────────────────────────────────────

@pytest.mark.asyncio
class TestConfidenceGatedRouter:
    async def test_score_above_threshold_answers(self):
        router = ConfidenceGatedRouter({"default": source_returning(81)})
        recorder = TurnRecorder()

        assert await router.route("x", recorder) is True
        assert recorder.texts == ["Paris is the capital of France."]

    async def test_score_at_threshold_is_not_enough(self):
        router = ConfidenceGatedRouter({"default": source_returning(80)})
        recorder = TurnRecorder()

        assert await router.route("x", recorder) is False
        assert recorder.messages == []

    async def test_lookup_failure_fails_open(self):
        source = AsyncMock()
        source.query.side_effect = QnaServiceError("connection refused")
        router = ConfidenceGatedRouter({"default": source})
        recorder = TurnRecorder()

        assert await router.route("x", recorder) is False
        assert recorder.messages == []

    async def test_no_source_for_context_passes_through(self):
        source = source_returning(99)
        router = ConfidenceGatedRouter({"lessons": source})

        assert await router.route("x", TurnRecorder(), context="default") is False
        source.query.assert_not_called()

    async def test_source_selected_by_context(self):
        lessons, other = source_returning(95, "from lessons"), source_returning(95, "from other")
        router = ConfidenceGatedRouter({"lessons": lessons, "other": other})
        recorder = TurnRecorder()

        await router.route("x", recorder, context="other")
        assert recorder.texts == ["from other"]
        lessons.query.assert_not_called()

    async def test_queries_with_message_text(self):
        source = source_returning(90)
        await ConfidenceGatedRouter({"default": source}).route("capital of france?", TurnRecorder())
        source.query.assert_awaited_once_with("capital of france?")


@pytest.mark.asyncio
class TestMessageRouter:
    async def test_confident_answer_skips_fallback(self):
        fallback = AsyncMock()
        router = MessageRouter(ConfidenceGatedRouter({"default": source_returning(81)}), fallback)

        assert await router.handle("x", TurnRecorder()) == "qna"
        fallback.assert_not_called()

    async def test_low_score_runs_fallback(self):
        fallback = AsyncMock()
        router = MessageRouter(ConfidenceGatedRouter({"default": source_returning(80)}), fallback)
        recorder = TurnRecorder()

        assert await router.handle("x", recorder) == "intent"
        fallback.assert_awaited_once_with("x", recorder)

    async def test_failure_runs_fallback(self):
        source = AsyncMock()
        source.query.side_effect = QnaServiceError("timeout")
        fallback = AsyncMock()
        router = MessageRouter(ConfidenceGatedRouter({"default": source}), fallback)

        assert await router.handle("x", TurnRecorder()) == "intent"
        fallback.assert_awaited_once()

    async def test_aclose_closes_sources(self):
        closable = source_returning(90)
        plain = Mock(spec=["query"])
        router = MessageRouter(ConfidenceGatedRouter({"default": closable, "other": plain}), AsyncMock())

        await router.aclose()
        closable.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_service_aclose_closes_owned_client():
    service = QnaService(endpoint="https://kb.example.org", knowledge_base_id="kb-1", endpoint_key="k")
    client = service._get_client()

    await service.aclose()
    assert client.is_closed
    await service.aclose()
