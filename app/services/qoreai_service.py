from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging
import time

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.models.conversation import (
    ConversationAnalysis,
    ConversationMessage,
    ConversationResponse,
    Screening,
    ScreeningResults,
    Timespan,
)
from app.services.conversation_analyzer import analyze_conversation, extract_content
from app.services.screening_evaluator import evaluate_screening

logger = logging.getLogger(__name__)

NO_CONTENT = "[No content available]"
FETCH_FAILED = "Failed to fetch conversation data"


class QoreAIServiceError(Exception):
    """Raised when screening or conversation data cannot be fetched."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ScreeningNotFoundError(QoreAIServiceError):
    pass


class MissingCallIdError(QoreAIServiceError):
    pass


def _bucket_role(role: Any) -> str:
    role = (role if isinstance(role, str) and role else "customer").lower()
    if "agent" in role or "assistant" in role or "system" in role:
        return "agent"
    if "user" in role or "candidate" in role or "customer" in role:
        return "customer"
    return role


def format_messages(results: Any) -> List[ConversationMessage]:
    """Normalize raw call messages into the shape the screening view analyzes."""
    items = results if isinstance(results, list) else [results]
    formatted = []
    for index, item in enumerate(items):
        if isinstance(item, ConversationMessage):
            item = item.model_dump(exclude_none=True)
        data = item if isinstance(item, dict) else {}

        content = extract_content(data)
        if not content:
            content = item if isinstance(item, str) and item else NO_CONTENT

        message = {
            "id": str(data.get("id") or f"msg-{int(time.time() * 1000)}-{index}"),
            "role": _bucket_role(data.get("role")),
            "content": content,
        }
        if isinstance(data.get("timestamp"), (str, int, float, datetime)) and data["timestamp"]:
            message["timestamp"] = data["timestamp"]
        if isinstance(data.get("timespan"), dict):
            try:
                message["timespan"] = Timespan(**data["timespan"])
            except ValidationError:
                logger.debug(f"Dropping unreadable timespan on message {message['id']}")
        formatted.append(ConversationMessage(**message))
    return formatted


class QoreAIService:
    """Client for the screening records and the QoreAI call messages behind them."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or settings.QOREAI_API_BASE_URL).rstrip("/")
        headers = {"Accept": "application/json"}
        token = token if token is not None else settings.QOREAI_API_TOKEN
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = client or httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout or settings.REQUEST_TIMEOUT,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.client.close()

    def _get(self, path: str) -> Dict[str, Any]:
        try:
            response = self.client.get(path)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            detail = None
            try:
                error_body = e.response.json()
                if isinstance(error_body, dict):
                    detail = error_body.get("message")
            except ValueError:
                pass
            raise QoreAIServiceError(detail or FETCH_FAILED, e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            raise QoreAIServiceError(FETCH_FAILED) from e
        if not isinstance(body, dict):
            raise QoreAIServiceError(FETCH_FAILED)
        return body

    def get_screening(self, screening_id: str) -> Screening:
        """Fetch a screening record by id."""
        try:
            body = self._get(f"/employee-interview-screenings/{screening_id}")
        except QoreAIServiceError as e:
            if e.status_code == 404:
                raise ScreeningNotFoundError(str(e), 404) from e
            raise
        if not body.get("success") or not isinstance(body.get("data"), dict):
            raise ScreeningNotFoundError("Screening not found")
        try:
            return Screening(**body["data"])
        except ValidationError as e:
            raise QoreAIServiceError(FETCH_FAILED) from e

    def get_conversation_messages(self, screening_id: str) -> ConversationResponse:
        """Fetch the call messages recorded for a screening.

        The screening record holds the call id used by QoreAI. When it also
        carries a stored transcript, that transcript replaces the fetched
        messages as a single system message.
        """
        logger.info(f"Fetching conversation for screening ID: {screening_id}")
        try:
            screening = self.get_screening(screening_id)
            if not screening.callid:
                raise MissingCallIdError("No call ID found for this screening")

            logger.info(f"Fetching conversation for call ID: {screening.callid}")
            body = self._get(f"/qoreai/calls/{screening.callid}/messages")
            logger.debug(f"QoreAI API response: {body}")
            try:
                conversation = ConversationResponse(**{**body, "data": body.get("data") or {}})
            except ValidationError as e:
                raise QoreAIServiceError(FETCH_FAILED) from e

            if screening.transcript:
                logger.info("Found transcript in screening data")
                conversation.data.results = [{
                    "id": "transcript-1",
                    "role": "system",
                    "content": screening.transcript,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "source": "screening_transcript",
                }]
            return conversation
        except QoreAIServiceError as e:
            logger.error(f"Error fetching conversation: {str(e)}")
            raise

    def analyze_screening(self, screening_id: str) -> ConversationAnalysis:
        """Fetch, normalize and analyze the conversation of a screening."""
        conversation = self.get_conversation_messages(screening_id)
        if not conversation.success:
            raise QoreAIServiceError("No conversation data available")
        messages = format_messages(conversation.data.results)
        analysis = analyze_conversation(messages)
        logger.info(
            f"Screening {screening_id}: {analysis.total_messages} messages, "
            f"sentiment {analysis.sentiment}"
        )
        return analysis

    def evaluate_screening(self, screening_id: str) -> ScreeningResults:
        """Score a screening from the analysis of its conversation."""
        return evaluate_screening(self.analyze_screening(screening_id))
