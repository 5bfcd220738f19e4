from typing import Any, Dict, Iterable, List, Optional
from collections import Counter
from datetime import datetime, timezone
import logging
import math
import re

from pydantic import BaseModel, TypeAdapter, ValidationError

from app.models.conversation import ConversationAnalysis

logger = logging.getLogger(__name__)

CONTENT_FIELDS = ("content", "text", "message", "transcript")

AGENT_ROLES = frozenset({"agent", "assistant", "system"})
CUSTOMER_ROLES = frozenset({"user", "candidate", "customer"})

POSITIVE_WORDS = ("great", "excellent", "good", "impressive", "well", "perfect", "amazing", "wonderful")
NEGATIVE_WORDS = ("bad", "poor", "terrible", "awful", "disappointing", "weak", "concern")

MAX_KEY_TOPICS = 5
MIN_TOPIC_LENGTH = 4
NO_TOPICS_PLACEHOLDER = "No key topics identified"

MIN_FALLBACK_DURATION = 30
SECONDS_PER_MESSAGE = 15

STOP_WORDS = frozenset({
    # Articles
    "a", "an", "the",
    # Pronouns
    "i", "me", "my", "mine", "myself",
    "you", "your", "yours", "yourself",
    "he", "him", "his", "himself",
    "she", "her", "hers", "herself",
    "it", "its", "itself",
    "we", "us", "our", "ours", "ourselves",
    "they", "them", "their", "theirs", "themselves",
    # Prepositions
    "about", "above", "across", "after", "against", "along", "among", "around", "at",
    "before", "behind", "below", "beneath", "beside", "between", "beyond", "by",
    "concerning", "considering", "despite", "down", "during", "except", "for", "from",
    "in", "inside", "into", "like", "near", "of", "off", "on", "onto", "out", "outside",
    "over", "past", "regarding", "round", "since", "through", "throughout", "to", "toward",
    "under", "underneath", "until", "up", "upon", "with", "within", "without",
    # Conjunctions
    "and", "but", "or", "nor", "so", "yet",
    "although", "as", "because", "if", "than", "that",
    "though", "till", "unless", "when", "where", "whether", "while",
    # Auxiliary verbs
    "am", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "having",
    "do", "does", "did", "doing",
    "can", "could", "may", "might", "must", "shall", "should", "will", "would",
    # Quantifiers and contraction fragments
    "also", "any", "both", "each", "few", "more", "most", "other", "some", "such",
    "no", "not", "only", "own", "same", "too", "very", "s", "t",
    "just", "don", "now", "d", "ll", "m", "o", "re", "ve", "y", "ain",
    "aren", "couldn", "didn", "doesn", "hadn", "hasn", "haven", "isn", "ma", "mightn",
    "mustn", "needn", "shan", "shouldn", "wasn", "weren", "won", "wouldn",
    # Conversational filler
    "hello", "hi", "hey", "thanks", "thank", "please", "okay", "ok", "yes", "maybe",
    "well", "right", "really", "actually", "basically", "literally",
    "exactly", "probably", "possibly", "perhaps", "usually",
    "often", "sometimes", "never", "always", "already", "still", "even",
    "quite", "rather", "pretty", "fairly", "enough", "much", "many",
    "none", "all", "neither", "either", "every", "several",
    "what", "which", "who", "whom", "whose",
    "this", "these", "those", "here", "there", "why", "how",
    "whence", "wherever", "whenever", "however", "whatever", "whichever", "whoever",
    "whomever", "whosever", "whilst", "lest", "once",
    "supposing", "therefore", "thus", "hence", "consequently", "assuming",
})

_NON_WORD = re.compile(r"[^\w\s]|_")
_datetime_adapter = TypeAdapter(datetime)


def _as_dict(message: Any) -> Dict[str, Any]:
    """Return the message as a plain mapping; anything unusable becomes empty."""
    if isinstance(message, BaseModel):
        return message.model_dump()
    if isinstance(message, dict):
        return message
    return {}


def extract_content(message: Any) -> str:
    """First non-empty text among the recognised content fields, or ''."""
    data = _as_dict(message)
    for field in CONTENT_FIELDS:
        value = data.get(field)
        if isinstance(value, str) and value:
            return value
    return ""


def _role(data: Dict[str, Any]) -> Optional[str]:
    role = data.get("role")
    return role if isinstance(role, str) else None


def is_valid_message(message: Any) -> bool:
    data = _as_dict(message)
    return _role(data) != "system" and bool(extract_content(data))


def parse_timestamp(value: Any) -> Optional[float]:
    """Seconds since the epoch for an ISO string, number or datetime; None if unparsable."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        moment = _datetime_adapter.validate_python(value)
    except ValidationError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def calculate_duration(messages: List[Any], total_messages: int) -> int:
    """Seconds between the earliest and latest timestamp over all messages.

    Only the ``timestamp`` field counts. The span is rounded half-up. Falls
    back to ``max(30, total_messages * 15)`` when fewer than two timestamps
    parse or the span is not positive.
    """
    times = [parse_timestamp(_as_dict(m).get("timestamp")) for m in messages]
    times = sorted(t for t in times if t is not None)
    duration = 0
    if len(times) > 1:
        duration = math.floor(times[-1] - times[0] + 0.5)
    if duration <= 0:
        duration = max(MIN_FALLBACK_DURATION, total_messages * SECONDS_PER_MESSAGE)
    return duration


def tokenize(content: str) -> List[str]:
    words = _NON_WORD.sub("", content.lower()).split()
    return [w for w in words if len(w) >= MIN_TOPIC_LENGTH and w not in STOP_WORDS]


def extract_key_topics(contents: List[str], limit: int = MAX_KEY_TOPICS) -> List[str]:
    """Rank words by a TF-IDF style score across the given message texts.

    ``tf`` is the word's total occurrences divided by the number of messages
    and ``idf`` is ``ln(messages / messages containing the word)``. Scores that
    tie (compared at 9 decimals) are ordered by raw occurrences, then by
    first appearance.
    """
    if not contents:
        return []
    term_counts: Counter = Counter()
    document_counts: Counter = Counter()
    for content in contents:
        words = tokenize(content)
        term_counts.update(words)
        document_counts.update(set(words))

    total = len(contents)
    scored = []
    for word, count in term_counts.items():
        tf = count / total
        idf = math.log(total / document_counts[word])
        scored.append((word, tf * idf, count))

    scored.sort(key=lambda item: (round(item[1], 9), item[2]), reverse=True)
    return [word for word, _, _ in scored[:limit]]


def score_sentiment(contents: List[str]) -> str:
    """Label from the presence (substring match) of fixed positive and negative words."""
    text = " ".join(content.lower() for content in contents)
    score = sum(1 for word in POSITIVE_WORDS if word in text)
    score -= sum(1 for word in NEGATIVE_WORDS if word in text)
    if score > 0:
        return "positive"
    if score < 0:
        return "negative"
    return "neutral"


def analyze_conversation(messages: Optional[Iterable[Any]]) -> ConversationAnalysis:
    """Summarise a screening conversation.

    Messages may be dicts, ``ConversationMessage`` models or junk such as
    ``None``; junk counts as a message without role, content or timestamp.
    System messages and messages without text are left out of every statistic
    except the duration, which looks at all timestamps.
    """
    messages = list(messages or [])
    valid = [_as_dict(m) for m in messages if is_valid_message(m)]
    if not valid:
        return ConversationAnalysis()

    total_messages = len(valid)
    roles = [(_role(m) or "").lower() for m in valid]
    agent_messages = sum(1 for role in roles if role in AGENT_ROLES)
    customer_messages = sum(1 for role in roles if role in CUSTOMER_ROLES)

    contents = [extract_content(m) for m in valid]
    key_topics = extract_key_topics(contents)

    analysis = ConversationAnalysis(
        total_messages=total_messages,
        agent_messages=agent_messages,
        customer_messages=customer_messages,
        duration=calculate_duration(messages, total_messages),
        key_topics=key_topics or [NO_TOPICS_PLACEHOLDER],
        sentiment=score_sentiment(contents),
    )
    logger.debug(
        f"Analyzed {total_messages} messages "
        f"(agent={agent_messages}, customer={customer_messages}, sentiment={analysis.sentiment})"
    )
    return analysis
