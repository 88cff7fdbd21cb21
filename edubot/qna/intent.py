"""
EduBot Lessons — Fallback Intent Classifier (LLM-Based)

Runs when the knowledge base has no confident answer. Fast-path for obvious
short inputs saves an LLM call; everything else goes to a small chat model in
JSON mode.

Intents:
    GREETING      : hello, hi, good morning
    HELP          : what can you do, help
    GOODBYE       : bye, see you
    LESSON_REQUEST: wants to start or continue a lesson
    NONE          : cannot determine
"""

import json
import logging
from typing import Literal, Optional

from openai import AsyncOpenAI

from edubot.config import INTENT_MODEL, INTENT_MAX_TOKENS
from edubot.transport import Transport

logger = logging.getLogger(__name__)

Intent = Literal["GREETING", "HELP", "GOODBYE", "LESSON_REQUEST", "NONE"]

VALID_INTENTS = {"GREETING", "HELP", "GOODBYE", "LESSON_REQUEST", "NONE"}

# ─── Fast-Path Sets (for short obvious inputs) ───────────────────────────────

FAST_GREETING = {"hi", "hello", "hey", "good morning", "good afternoon", "good evening"}
FAST_GOODBYE = {"bye", "goodbye", "see you", "see you later", "good night"}
FAST_HELP = {"help", "what can you do", "what can you do?", "help me"}

INTENT_REPLIES = {
    "GREETING": "Hello! I'm your tutor. Say \"start a lesson\" whenever you're ready.",
    "HELP": (
        "I can teach you short lessons with pictures and questions, "
        "and answer questions about the lessons."
    ),
    "GOODBYE": "Goodbye! Come back soon to keep learning.",
    "LESSON_REQUEST": "Great! Pick a lesson from the list to begin.",
    "NONE": "Sorry, I didn't get that. You can ask me for help or start a lesson.",
}

CLASSIFIER_SYSTEM = """You classify messages sent to a language-learning chat tutor.

Intents (pick EXACTLY ONE):
- GREETING: says hello (hi, hello, good morning)
- HELP: asks what the bot can do or how to use it
- GOODBYE: wants to leave (bye, see you, that's all)
- LESSON_REQUEST: wants to start, continue or choose a lesson
- NONE: anything else

Respond ONLY with JSON: {"intent":"...","confidence":0.0-1.0}"""


class IntentClassifier:
    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = INTENT_MODEL):
        self._client = client
        self._model = model

    async def classify(self, text: str) -> dict:
        """
        Classify a message.

        Returns dict with keys:
            - intent: Intent string
            - confidence: 0.0-1.0 float
        """
        if not text or not text.strip():
            return {"intent": "NONE", "confidence": 0.0}

        normalized = text.strip().lower().rstrip("!.")

        # ─── Fast Path ────────────────────────────────────────────────────
        if len(normalized.split()) <= 4:
            if normalized in FAST_GOODBYE:
                return {"intent": "GOODBYE", "confidence": 0.99}
            if normalized in FAST_GREETING:
                return {"intent": "GREETING", "confidence": 0.99}
            if normalized in FAST_HELP:
                return {"intent": "HELP", "confidence": 0.99}

        # ─── LLM Classification ───────────────────────────────────────────
        if self._client is None:
            return {"intent": "NONE", "confidence": 0.0}

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": CLASSIFIER_SYSTEM},
                    {"role": "user", "content": text},
                ],
                temperature=0,
                max_tokens=INTENT_MAX_TOKENS,
                response_format={"type": "json_object"},
            )
            result = json.loads(response.choices[0].message.content)
        except Exception as e:
            logger.warning(f"Intent classification failed, using NONE: {e}")
            return {"intent": "NONE", "confidence": 0.0}

        if not isinstance(result, dict):
            logger.warning(f"Intent classifier returned non-object JSON: {result!r}")
            return {"intent": "NONE", "confidence": 0.0}

        intent = result.get("intent", "NONE")
        if not isinstance(intent, str) or intent not in VALID_INTENTS:
            intent = "NONE"

        try:
            confidence = float(result.get("confidence", 0.5))
        except (TypeError, ValueError):
            confidence = 0.5

        return {"intent": intent, "confidence": confidence}

    async def handle(self, text: str, transport: Transport) -> str:
        """Fallback handler: classify and post the canned reply. Returns the intent."""
        result = await self.classify(text)
        intent = result["intent"]
        logger.info(f"Fallback intent: {intent} ({result['confidence']:.2f})")
        await transport.post_text(INTENT_REPLIES[intent])
        return intent
