"""
Tests for choice_prompt.py — exact matching, re-prompts, exhaustion.
"""

import pytest

from edubot.fsm.choice_prompt import ChoiceOutcome, ChoicePrompt
from edubot.transport import TurnRecorder

PROMPT = ChoicePrompt(
    choices=("Next topic", "Say it again"),
    prompt="End of topic!",
    retry_prompt="Please pick one of the options",
    max_attempts=2,
)


class TestCheck:
    def test_exact_choice_matches(self):
        result = PROMPT.check("Next topic", 0)
        assert result.outcome == ChoiceOutcome.MATCHED
        assert result.choice == "Next topic"
        assert result.attempts_used == 0

    def test_match_is_case_sensitive(self):
        assert PROMPT.check("next topic", 0).outcome == ChoiceOutcome.RETRY

    def test_first_miss_retries(self):
        result = PROMPT.check("banana", 0)
        assert result.outcome == ChoiceOutcome.RETRY
        assert result.attempts_used == 1
        assert result.choice is None

    def test_second_miss_exhausts(self):
        result = PROMPT.check("banana", 1)
        assert result.outcome == ChoiceOutcome.EXHAUSTED
        assert result.attempts_used == 2

    def test_missing_text_counts_as_miss(self):
        assert PROMPT.check(None, 0).outcome == ChoiceOutcome.RETRY

    def test_match_after_a_miss(self):
        result = PROMPT.check("Say it again", 1)
        assert result.outcome == ChoiceOutcome.MATCHED
        assert result.attempts_used == 1

    def test_single_attempt_prompt_exhausts_immediately(self):
        prompt = ChoicePrompt(("a", "b"), "?", "again?", max_attempts=1)
        assert prompt.check("c", 0).outcome == ChoiceOutcome.EXHAUSTED


@pytest.mark.asyncio
async def test_ask_posts_prompt_with_choices():
    recorder = TurnRecorder()
    await PROMPT.ask(recorder)
    [msg] = recorder.messages
    assert msg.kind == "choices"
    assert msg.text == "End of topic!"
    assert msg.choices == ["Next topic", "Say it again"]


@pytest.mark.asyncio
async def test_receive_sends_retry_prompt_on_miss():
    recorder = TurnRecorder()
    result = await PROMPT.receive("banana", 0, recorder)
    assert result.outcome == ChoiceOutcome.RETRY
    [msg] = recorder.messages
    assert msg.text == "Please pick one of the options"
    assert msg.choices == ["Next topic", "Say it again"]


@pytest.mark.asyncio
async def test_receive_is_silent_on_exhaustion():
    recorder = TurnRecorder()
    result = await PROMPT.receive("banana", 1, recorder)
    assert result.outcome == ChoiceOutcome.EXHAUSTED
    assert recorder.messages == []


@pytest.mark.asyncio
async def test_receive_is_silent_on_match():
    recorder = TurnRecorder()
    await PROMPT.receive("Next topic", 0, recorder)
    assert recorder.messages == []
