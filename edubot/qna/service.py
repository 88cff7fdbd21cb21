"""
EduBot Lessons — QnA Knowledge Base Client

Talks to a QnA-Maker style generateAnswer endpoint. Returns the top answer
with its confidence score (0-100). Every transport problem surfaces as a
single exception type, QnaServiceError, so callers can fail open on it.
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import httpx

from edubot.config import (
    QNA_ENDPOINT, QNA_KNOWLEDGE_BASE_ID, QNA_ENDPOINT_KEY, QNA_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class QnaServiceError(Exception):
    """Knowledge base could not be queried (network, HTTP status, bad body)."""


@dataclass(frozen=True)
class QnaResult:
    answer: str
    questions: Tuple[str, ...]
    score: float


class KnowledgeSource(Protocol):
    async def query(self, text: str) -> QnaResult: ...


class QnaService:
    """
    One knowledge base.

    The httpx client is created lazily and reused; pass one in to share a
    connection pool or to mock the transport in tests.
    """

    def __init__(
        self,
        endpoint: str = QNA_ENDPOINT,
        knowledge_base_id: str = QNA_KNOWLEDGE_BASE_ID,
        endpoint_key: str = QNA_ENDPOINT_KEY,
        timeout: float = QNA_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = f"{endpoint.rstrip('/')}/knowledgebases/{knowledge_base_id}/generateAnswer"
        self._headers = {
            "Authorization": f"EndpointKey {endpoint_key}",
            "Content-Type": "application/json",
        }
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def query(self, text: str) -> QnaResult:
        start = time.perf_counter()
        try:
            response = await self._get_client().post(
                self.url,
                json={"question": text, "top": 1},
                headers=self._headers,
            )
            if response.status_code != 200:
                logger.error(f"QnA HTTP {response.status_code}: {response.text[:200]}")
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.error(f"QnA error after {elapsed}ms: {e}")
            raise QnaServiceError(str(e)) from e
        except ValueError as e:
            raise QnaServiceError(f"QnA returned invalid JSON: {e}") from e

        result = parse_answer(data)
        elapsed = int((time.perf_counter() - start) * 1000)
        logger.info(f"QnA response: {elapsed}ms, score={result.score}")
        return result

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def parse_answer(data) -> QnaResult:
    """
    Pick the top entry of a generateAnswer body.

    No answers → empty answer with score 0.
    """
    if not isinstance(data, dict) or not isinstance(data.get("answers", []), list):
        raise QnaServiceError("QnA body is missing the 'answers' list")

    answers = data.get("answers") or []
    if not answers:
        return QnaResult(answer="", questions=(), score=0.0)

    top = answers[0]
    try:
        return QnaResult(
            answer=str(top.get("answer", "")),
            questions=tuple(top.get("questions") or ()),
            score=float(top.get("score", 0)),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise QnaServiceError(f"Malformed QnA answer: {e}") from e
