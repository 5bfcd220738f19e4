from typing import List, Optional
import logging
import math

from app.models.conversation import ConversationAnalysis, ScreeningResults, SkillScores
from app.services.conversation_analyzer import NO_TOPICS_PLACEHOLDER

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 1800
MAX_BASE_SCORE = 85
MAX_SKILL_SCORE = 95
TECHNICAL_TOPIC_HINTS = ("technical", "code", "programming", "experience", "skills")

# Topic keyword -> strength wording; exact matches are tried before partial ones
SKILL_STRENGTHS = {
    # Technical skills
    "javascript": "Proficient in JavaScript development",
    "react": "Experience with React.js development",
    "node": "Skilled in Node.js backend development",
    "python": "Strong Python programming skills",
    "java": "Java development experience",
    "sql": "Database and SQL knowledge",
    "api": "API development experience",
    "cloud": "Cloud computing experience",
    "aws": "AWS cloud platform knowledge",
    "docker": "Experience with Docker containers",
    "git": "Proficient with version control",
    "testing": "Software testing experience",
    "frontend": "Frontend development skills",
    "backend": "Backend development experience",
    "database": "Database management skills",
    "mobile": "Mobile app development experience",
    "devops": "DevOps practices knowledge",
    # Screening aspects
    "screening": "Performed well in technical screening",
    "content": "Strong knowledge of technical content",
    "available": "Demonstrated good availability and responsiveness",
    "interview": "Effective interview participation",
    "code": "Strong coding abilities",
    "algorithm": "Good understanding of algorithms",
    "problem solving": "Effective problem-solving skills",
    "technical": "Solid technical knowledge base",
}

COMPLETED_SCREENING = "Successfully completed the technical screening"
LIMITED_DATA = "Limited assessment data available for detailed feedback"
NO_RECOMMENDATION_DATA = "Insufficient data for recommendations"

MAX_STRENGTHS = 4
MAX_WEAKNESSES = 3


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _response_ratio(analysis: ConversationAnalysis) -> Optional[float]:
    if not analysis.total_messages:
        return None
    return analysis.customer_messages / analysis.total_messages


def _sentiment_bonus(analysis: ConversationAnalysis, positive: int, negative: int, neutral: int = 0) -> int:
    if analysis.sentiment == "positive":
        return positive
    if analysis.sentiment == "negative":
        return negative
    return neutral


def generate_skill_scores(analysis: Optional[ConversationAnalysis]) -> SkillScores:
    """Score four skills from 50-95, starting from a base that grows with message count."""
    if analysis is None:
        return SkillScores()

    base = min(MAX_BASE_SCORE, 50 + analysis.total_messages * 2)
    technical_topics = [
        topic for topic in analysis.key_topics
        if any(hint in topic for hint in TECHNICAL_TOPIC_HINTS)
    ]
    engagement_bonus = 10 if analysis.total_messages > 10 else 0

    return SkillScores(
        technical=min(MAX_SKILL_SCORE, base + len(technical_topics) * 3),
        communication=min(MAX_SKILL_SCORE, base + _sentiment_bonus(analysis, 10, -10)),
        problem_solving=min(MAX_SKILL_SCORE, base + len(analysis.key_topics) * 2),
        cultural_fit=min(MAX_SKILL_SCORE, base + _sentiment_bonus(analysis, 15, -10, 5) + engagement_bonus),
    )


def generate_strengths(analysis: Optional[ConversationAnalysis]) -> List[str]:
    if analysis is None or not analysis.key_topics:
        return [COMPLETED_SCREENING]

    strengths = []
    used = set()
    for topic in analysis.key_topics:
        if topic == NO_TOPICS_PLACEHOLDER:
            continue
        topic = topic.lower().strip()
        if len(topic) < 3:
            continue
        key = next((k for k in SKILL_STRENGTHS if k == topic and k not in used), None)
        if key is None:
            key = next((k for k in SKILL_STRENGTHS if k in topic and k not in used), None)
        if key is not None:
            strengths.append(SKILL_STRENGTHS[key])
            used.add(key)

    ratio = _response_ratio(analysis)
    if ratio is not None:
        if analysis.sentiment == "positive" and analysis.total_messages > 5:
            strengths.append("Clear and effective communication style")
        if ratio > 0.4 and analysis.total_messages > 8:
            strengths.append("Active and engaged participant")

    return (strengths or [COMPLETED_SCREENING])[:MAX_STRENGTHS]


def generate_weaknesses(analysis: Optional[ConversationAnalysis]) -> List[str]:
    if analysis is None:
        return [LIMITED_DATA]

    weaknesses = []
    ratio = _response_ratio(analysis)

    if analysis.total_messages < 10:
        weaknesses.append("Limited engagement in the conversation")

    if analysis.sentiment == "negative":
        weaknesses.append("Needs to maintain a more constructive communication style")
    elif analysis.sentiment == "neutral" and analysis.total_messages > 10:
        weaknesses.append("Could show more enthusiasm in technical discussions")

    if ratio is not None and ratio < 0.3 and analysis.total_messages > 5:
        weaknesses.append("Should contribute more actively to the dialogue")
    elif analysis.customer_messages < 3:
        weaknesses.append("Needs to elaborate more in responses")

    if len(analysis.key_topics) < 3:
        weaknesses.append("Could expand on technical depth in discussions")

    if not weaknesses:
        weaknesses = [
            "Could benefit from more experience in the field",
            "Needs more experience with advanced frameworks",
        ]
    return weaknesses[:MAX_WEAKNESSES]


def recommendation_score(analysis: ConversationAnalysis, strengths: List[str], weaknesses: List[str]) -> int:
    if not analysis.total_messages:
        return 50
    return (
        50
        + _sentiment_bonus(analysis, 20, -10)
        + min(20, analysis.total_messages)
        + len(strengths) * 5
        - len(weaknesses) * 5
    )


def generate_recommendations(
    analysis: Optional[ConversationAnalysis],
    strengths: List[str],
    weaknesses: List[str],
) -> List[str]:
    if analysis is None:
        return [NO_RECOMMENDATION_DATA]

    score = recommendation_score(analysis, strengths, weaknesses)
    if score >= 75:
        return ["Strong candidate for the role", "Recommend moving forward"]
    if score >= 60:
        return ["Consider for next round", "May need additional assessment"]
    return ["Recommend additional screening", "Not a strong match for current position"]


def evaluate_screening(analysis: Optional[ConversationAnalysis]) -> ScreeningResults:
    """Turn a conversation analysis into screening scores and feedback.

    ``analysis`` may be ``None`` when no conversation could be loaded; the
    results then carry neutral default scores and placeholder feedback.
    """
    skills = generate_skill_scores(analysis)
    strengths = generate_strengths(analysis)
    weaknesses = generate_weaknesses(analysis)
    overall = _round_half_up(
        (skills.technical + skills.communication + skills.problem_solving + skills.cultural_fit) / 4
    )

    results = ScreeningResults(
        score=overall,
        technical=skills.technical,
        behavioral=_round_half_up((skills.communication + skills.cultural_fit) / 2),
        communication=skills.communication,
        problem_solving=skills.problem_solving,
        cultural_fit=skills.cultural_fit,
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=generate_recommendations(analysis, strengths, weaknesses),
        duration=(analysis.duration if analysis else 0) or DEFAULT_DURATION,
        analysis=analysis,
    )
    logger.debug(f"Screening scored {overall} with {len(strengths)} strengths, {len(weaknesses)} weaknesses")
    return results
