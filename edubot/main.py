"""
EduBot Lessons — Main Application
FastAPI app. Mounts routers and CORS. Lesson library loaded on startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edubot import __version__
from edubot.config import CORS_ORIGINS, LOG_LEVEL
from edubot.content.loader import get_lesson_library
from edubot.qna.router import close_message_router
from edubot.routers import chat, lesson

logger = logging.getLogger("edubot")


# ─── Lifespan (startup/shutdown) ─────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: configure logging + load lessons."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    library = get_lesson_library()
    if len(library) == 0:
        logger.warning("No lessons loaded; /api/lesson/start will return 404")

    logger.info(f"EduBot Lessons v{__version__} ready")
    yield
    logger.info("Shutting down")
    await close_message_router()


# ─── App ─────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="EduBot Lessons",
    description="Lesson-driven tutoring dialogs with a QnA fallback router",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lesson.router)
app.include_router(chat.router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("edubot.main:app", host="0.0.0.0", port=8000)
