"""
EduBot Lessons — Bounded-Retry Choice Prompt

Ask a closed-set question, re-prompt on unrecognized input, give up after
max_attempts unrecognized inputs. The prompt itself is stateless: the caller
keeps the attempt counter in SessionProgress and passes it in each turn.

    attempts_used = 0 → "x"  → RETRY      (re-prompt sent, attempts_used = 1)
    attempts_used = 1 → "y"  → EXHAUSTED  (no re-prompt, max_attempts = 2)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from edubot.transport import Transport

logger = logging.getLogger("edubot.fsm.choice_prompt")


class ChoiceOutcome(str, Enum):
    MATCHED = "MATCHED"
    RETRY = "RETRY"
    EXHAUSTED = "EXHAUSTED"


@dataclass(frozen=True)
class ChoiceResult:
    outcome: ChoiceOutcome
    attempts_used: int
    choice: Optional[str] = None


@dataclass(frozen=True)
class ChoicePrompt:
    choices: Sequence[str]
    prompt: str
    retry_prompt: str
    max_attempts: int

    def check(self, text: Optional[str], attempts_used: int) -> ChoiceResult:
        """Pure decision for one inbound input. Matching is exact and case-sensitive."""
        if text is not None and text in self.choices:
            return ChoiceResult(ChoiceOutcome.MATCHED, attempts_used, choice=text)

        attempts_used += 1
        if attempts_used < self.max_attempts:
            return ChoiceResult(ChoiceOutcome.RETRY, attempts_used)
        return ChoiceResult(ChoiceOutcome.EXHAUSTED, attempts_used)

    async def ask(self, transport: Transport) -> None:
        await transport.post_choices(self.prompt, self.choices)

    async def receive(
        self,
        text: Optional[str],
        attempts_used: int,
        transport: Transport,
    ) -> ChoiceResult:
        """Check the input and send the re-prompt when another attempt remains."""
        result = self.check(text, attempts_used)

        if result.outcome == ChoiceOutcome.RETRY:
            logger.info(f"Unrecognized choice {text!r}, attempt {result.attempts_used}/{self.max_attempts}")
            await transport.post_choices(self.retry_prompt, self.choices)
        elif result.outcome == ChoiceOutcome.EXHAUSTED:
            logger.info(f"Choice attempts exhausted after {result.attempts_used} tries")

        return result
