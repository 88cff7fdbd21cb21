"""Shared fixtures: a two-topic lesson and a recording transport."""

import pytest

from edubot.content.lesson import Lesson
from edubot.transport import TurnRecorder

from tests.factories import make_topic


@pytest.fixture
def lesson() -> Lesson:
    return Lesson(
        lesson_id="capitals",
        title="Capitals",
        topics=(
            make_topic("Capital of France?", "Paris"),
            make_topic("Capital of Italy?", "Rome"),
        ),
    )


@pytest.fixture
def recorder() -> TurnRecorder:
    return TurnRecorder()
