from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Sentiment = Literal["positive", "neutral", "negative"]


class Timespan(BaseModel):
    """Start/end marks QoreAI attaches to each call message"""
    start: Optional[Union[str, float]] = None
    end: Optional[Union[str, float]] = None


class ConversationMessage(BaseModel):
    """One turn of a screening conversation.

    Every field is optional: the text may arrive under ``content``, ``text``,
    ``message`` or ``transcript`` depending on which system produced it, and
    anything else the upstream sends is kept as an extra field.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    role: Optional[str] = None
    content: Optional[str] = None
    text: Optional[str] = None
    message: Optional[str] = None
    transcript: Optional[str] = None
    timestamp: Optional[Union[datetime, float, str]] = None
    timespan: Optional[Timespan] = None


class ConversationAnalysis(BaseModel):
    """Summary of a conversation, produced fresh on every analysis"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_messages: int = Field(0, alias="totalMessages")
    agent_messages: int = Field(0, alias="agentMessages")
    customer_messages: int = Field(0, alias="customerMessages")
    duration: int = 0
    key_topics: List[str] = Field(default_factory=list, alias="keyTopics")
    sentiment: Sentiment = "neutral"


class ConversationData(BaseModel):
    next: Optional[str] = None
    previous: Optional[str] = None
    total: int = 0
    results: List[Any] = []


class ConversationResponse(BaseModel):
    """Envelope returned by the QoreAI call messages endpoint"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success: bool = True
    source: Optional[str] = None
    data: ConversationData = Field(default_factory=ConversationData)
    timestamp: Optional[str] = None
    qore_integration_version: Optional[str] = Field(None, alias="qoreIntegrationVersion")


class Screening(BaseModel):
    """Interview screening record; only the fields the fetch relies on are typed"""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    callid: Optional[Union[str, int]] = None
    transcript: Optional[str] = None
    status: Optional[str] = None


class SkillScores(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    technical: int = 75
    communication: int = 75
    problem_solving: int = Field(75, alias="problemSolving")
    cultural_fit: int = Field(75, alias="culturalFit")


class ScreeningResults(BaseModel):
    """Scores and feedback derived from a conversation analysis"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    score: int
    technical: int
    behavioral: int
    communication: int
    problem_solving: int = Field(alias="problemSolving")
    cultural_fit: int = Field(alias="culturalFit")
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    duration: int
    analysis: Optional[ConversationAnalysis] = None
