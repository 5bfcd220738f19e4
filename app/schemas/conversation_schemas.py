from pydantic import BaseModel
from typing import Any, List

class AnalyzeRequest(BaseModel):
    """Request schema for analyzing a posted conversation."""
    messages: List[Any] = []

class HealthResponse(BaseModel):
    status: str = "ok"
