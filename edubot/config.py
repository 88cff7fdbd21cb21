"""
EduBot Lessons — Configuration
All environment variables and constants. Single source of truth.
No other file reads os.environ directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ─── Paths ───────────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env file if present
load_dotenv(BASE_DIR / ".env")

LESSONS_DIR = Path(os.getenv("LESSONS_DIR", str(Path(__file__).resolve().parent / "content" / "lessons")))

# ─── Knowledge Base (QnA) ────────────────────────────────────────────────────
QNA_ENDPOINT = os.getenv("QNA_ENDPOINT", "")
# e.g. https://my-kb.azurewebsites.net/qnamaker
QNA_KNOWLEDGE_BASE_ID = os.getenv("QNA_KNOWLEDGE_BASE_ID", "")
QNA_ENDPOINT_KEY = os.getenv("QNA_ENDPOINT_KEY", "")
QNA_TIMEOUT_SECONDS = float(os.getenv("QNA_TIMEOUT_SECONDS", "10"))
QNA_THRESHOLD = 80  # 0-100 scale, strictly greater than qualifies

# Context id the chat endpoint uses when the client sends none
DEFAULT_CHAT_CONTEXT = "default"

# ─── Intent Classifier (fallback path) ───────────────────────────────────────
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
INTENT_MODEL = os.getenv("INTENT_MODEL", "gpt-4o-mini")
INTENT_MAX_TOKENS = int(os.getenv("INTENT_MAX_TOKENS", "60"))

# ─── Lesson Flow ─────────────────────────────────────────────────────────────
MAX_CONTINUATION_ATTEMPTS = 2

END_OF_TOPIC_PROMPT = "This marks the end of current topic!"
END_OF_TOPIC_RETRY = (
    "I am sorry but I didn't understand that. "
    "I need you to select one of the options below"
)
LESSON_COMPLETE_MESSAGE = "This is the end of the current lesson. Thank you!"
NO_MORE_LESSONS_MESSAGE = "There are no more topics in this lesson. Please pick another lesson!"

# ─── CORS ────────────────────────────────────────────────────────────────────
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# ─── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
