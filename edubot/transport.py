"""
EduBot Lessons — Transport Seam

The host delivers messages and plays audio. The core only talks to it through
the Transport protocol below. TurnRecorder is the in-process implementation:
it collects everything emitted during one turn so the HTTP layer (or a test)
can return it.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class InboundMessage:
    """One student turn: free text and/or a submit-action payload."""
    text: Optional[str] = None
    value: Any = None


@dataclass(frozen=True)
class TopicCard:
    """Question + image + selectable answer options."""
    question: str
    image_url: str
    choices: Sequence[str]


@dataclass
class OutboundMessage:
    kind: str                      # "text" | "card" | "choices" | "speech"
    text: str = ""
    image_url: Optional[str] = None
    choices: List[str] = field(default_factory=list)
    speak: Optional[str] = None    # Spoken string for "speech" messages

    def to_dict(self) -> dict:
        return asdict(self)


class Transport(Protocol):
    async def post_text(self, text: str) -> None: ...

    async def post_card(self, card: TopicCard) -> None: ...

    async def post_choices(self, prompt: str, choices: Sequence[str]) -> None: ...

    async def say(self, text: str, speak: str) -> None: ...


class TurnRecorder:
    """Transport that records outbound messages for a single turn."""

    def __init__(self):
        self.messages: List[OutboundMessage] = []

    async def post_text(self, text: str) -> None:
        self.messages.append(OutboundMessage(kind="text", text=text))

    async def post_card(self, card: TopicCard) -> None:
        self.messages.append(OutboundMessage(
            kind="card",
            text=card.question,
            image_url=card.image_url,
            choices=list(card.choices),
        ))

    async def post_choices(self, prompt: str, choices: Sequence[str]) -> None:
        self.messages.append(OutboundMessage(kind="choices", text=prompt, choices=list(choices)))

    async def say(self, text: str, speak: str) -> None:
        self.messages.append(OutboundMessage(kind="speech", text=text, speak=speak))

    @property
    def texts(self) -> List[str]:
        return [m.text for m in self.messages]

    def of_kind(self, kind: str) -> List[OutboundMessage]:
        return [m for m in self.messages if m.kind == kind]

    def to_list(self) -> List[dict]:
        return [m.to_dict() for m in self.messages]
