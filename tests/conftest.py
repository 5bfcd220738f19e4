import pytest
import sys
import os

import httpx

# Ensure app is in the sys.path before importing anything
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.services.qoreai_service import QoreAIService

BASE_URL = "http://qoreai.test/api"

@pytest.fixture
def interview_messages():
    return [
        {
            "id": "msg_123",
            "role": "agent",
            "content": "Hello, thank you for joining the interview screening. How are you today?",
            "timespan": {"start": "2025-06-02T10:30:00Z", "end": "2025-06-02T10:30:10Z"},
        },
        {
            "id": "msg_124",
            "role": "customer",
            "content": "I'm doing well, thank you. I'm excited about this opportunity.",
            "timespan": {"start": "2025-06-02T10:30:15Z", "end": "2025-06-02T10:30:25Z"},
        },
        {
            "id": "msg_125",
            "role": "agent",
            "content": "Great! Let's start with your background. Can you tell me about your experience?",
            "timespan": {"start": "2025-06-02T10:30:30Z", "end": "2025-06-02T10:30:40Z"},
        },
        {
            "id": "msg_126",
            "role": "customer",
            "content": "I have 5 years of experience in software development, primarily working with React and Node.js.",
            "timespan": {"start": "2025-06-02T10:30:45Z", "end": "2025-06-02T10:30:55Z"},
        },
    ]

@pytest.fixture
def make_qoreai_service():
    """Build a QoreAIService whose HTTP calls are answered by a dict of path -> (status, body)."""
    def _make(routes):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            path = request.url.path[len("/api"):]
            if path not in routes:
                return httpx.Response(404, json={"success": False, "message": "Not found"})
            status, body = routes[path]
            if isinstance(body, Exception):
                raise body
            return httpx.Response(status, json=body)

        client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        service = QoreAIService(base_url=BASE_URL, client=client)
        service.requested = requested
        return service
    return _make
