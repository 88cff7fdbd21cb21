"""
Tests for the fallback intent classifier.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from edubot.qna.intent import INTENT_REPLIES, IntentClassifier
from edubot.transport import TurnRecorder

pytestmark = pytest.mark.asyncio


def llm_client(content: str) -> Mock:
    client = Mock()
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
    ))
    return client


class TestFastPath:
    async def test_greeting(self):
        result = await IntentClassifier().classify("Hello!")
        assert result["intent"] == "GREETING"

    async def test_goodbye(self):
        result = await IntentClassifier().classify("bye")
        assert result["intent"] == "GOODBYE"

    async def test_help(self):
        result = await IntentClassifier().classify("what can you do?")
        assert result["intent"] == "HELP"

    async def test_fast_path_skips_llm(self):
        client = llm_client('{"intent": "NONE"}')
        await IntentClassifier(client=client).classify("hi")
        client.chat.completions.create.assert_not_called()

    async def test_empty_text(self):
        result = await IntentClassifier().classify("   ")
        assert result == {"intent": "NONE", "confidence": 0.0}


class TestLLMPath:
    async def test_no_client_returns_none(self):
        result = await IntentClassifier().classify("teach me something about capitals")
        assert result["intent"] == "NONE"

    async def test_llm_intent(self):
        client = llm_client('{"intent": "LESSON_REQUEST", "confidence": 0.8}')
        result = await IntentClassifier(client=client).classify("can we start the capitals lesson")
        assert result == {"intent": "LESSON_REQUEST", "confidence": 0.8}

    async def test_unknown_intent_becomes_none(self):
        client = llm_client('{"intent": "DANCE", "confidence": 0.9}')
        result = await IntentClassifier(client=client).classify("let's dance all night long")
        assert result["intent"] == "NONE"

    async def test_bad_json_becomes_none(self):
        client = llm_client("not json")
        result = await IntentClassifier(client=client).classify("something long and unclear here")
        assert result["intent"] == "NONE"

    @pytest.mark.parametrize("content", ['["GREETING"]', '"GREETING"', "3"])
    async def test_non_object_json_becomes_none(self, content):
        client = llm_client(content)
        result = await IntentClassifier(client=client).classify("something long and unclear here")
        assert result == {"intent": "NONE", "confidence": 0.0}

    async def test_llm_error_becomes_none(self):
        client = Mock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))
        result = await IntentClassifier(client=client).classify("something long and unclear here")
        assert result["intent"] == "NONE"


async def test_handle_posts_canned_reply():
    recorder = TurnRecorder()
    intent = await IntentClassifier().handle("goodbye", recorder)
    assert intent == "GOODBYE"
    assert recorder.texts == [INTENT_REPLIES["GOODBYE"]]


async def test_unhashable_intent_becomes_none():
    client = llm_client('{"intent": ["GREETING"], "confidence": 0.9}')
    result = await IntentClassifier(client=client).classify("something long and unclear here")
    assert result["intent"] == "NONE"
