import copy

import pytest
from pydantic import ValidationError

from app.models.conversation import ConversationAnalysis, ConversationMessage
from app.services.conversation_analyzer import (
    NO_TOPICS_PLACEHOLDER,
    STOP_WORDS,
    analyze_conversation,
    calculate_duration,
    extract_content,
    extract_key_topics,
    parse_timestamp,
    score_sentiment,
)

EMPTY = {
    "totalMessages": 0,
    "agentMessages": 0,
    "customerMessages": 0,
    "duration": 0,
    "keyTopics": [],
    "sentiment": "neutral",
}

def test_empty_conversation():
    analysis = analyze_conversation([])
    assert analysis.model_dump(by_alias=True) == EMPTY

def test_none_input():
    assert analyze_conversation(None).model_dump(by_alias=True) == EMPTY

def test_only_system_messages():
    analysis = analyze_conversation([{"role": "system", "content": "x"}])
    assert analysis.model_dump(by_alias=True) == EMPTY

def test_interview_scenario(interview_messages):
    analysis = analyze_conversation(interview_messages)
    assert analysis.total_messages == 4
    assert analysis.agent_messages == 2
    assert analysis.customer_messages == 2
    assert analysis.duration == 60
    assert "experience" in analysis.key_topics
    assert analysis.key_topics == ["experience", "joining", "interview", "screening", "today"]
    assert analysis.sentiment == "positive"

def test_single_message_without_timestamp():
    analysis = analyze_conversation([{"role": "user", "content": "Python developers build services"}])
    assert analysis.total_messages == 1
    assert analysis.duration == 30

def test_malformed_messages():
    messages = [
        {"id": "msg_1", "role": "agent"},
        {"content": "Hello"},
        None,
        None,
        42,
        "not a message",
    ]
    analysis = analyze_conversation(messages)
    assert analysis.total_messages == 1
    assert analysis.agent_messages == 0
    assert analysis.customer_messages == 0
    assert analysis.duration == 30
    assert analysis.key_topics == [NO_TOPICS_PLACEHOLDER]
    assert analysis.sentiment == "neutral"

def test_unrecognized_roles_count_toward_neither():
    messages = [
        {"role": "interviewer", "content": "Describe your deployment pipeline"},
        {"role": "candidate", "content": "We deploy containers nightly"},
        {"role": "Assistant", "content": "Understood, moving along"},
    ]
    analysis = analyze_conversation(messages)
    assert analysis.total_messages == 3
    assert analysis.agent_messages == 1
    assert analysis.customer_messages == 1
    assert analysis.agent_messages + analysis.customer_messages <= analysis.total_messages

def test_uppercase_system_role_is_kept_and_counted_as_agent():
    analysis = analyze_conversation([{"role": "SYSTEM", "content": "Recording started"}])
    assert analysis.total_messages == 1
    assert analysis.agent_messages == 1

def test_accepts_conversation_message_models():
    messages = [
        ConversationMessage(id="1", role="agent", text="Tell me about kubernetes"),
        ConversationMessage(id="2", role="user", transcript="Kubernetes clusters in production"),
    ]
    analysis = analyze_conversation(messages)
    assert analysis.total_messages == 2
    assert "kubernetes" in analysis.key_topics

def test_extract_content_order():
    assert extract_content({"content": "a", "text": "b"}) == "a"
    assert extract_content({"content": "", "text": "", "message": "c"}) == "c"
    assert extract_content({"transcript": "d"}) == "d"
    assert extract_content({"content": 123, "text": "e"}) == "e"
    assert extract_content({}) == ""
    assert extract_content(None) == ""

def test_no_key_topics_placeholder():
    analysis = analyze_conversation([{"role": "user", "content": "ok yes, I am here."}])
    assert analysis.key_topics == [NO_TOPICS_PLACEHOLDER]

def test_single_message_topics_follow_first_appearance():
    topics = extract_key_topics(["Python developers build reliable services quickly today"])
    assert topics == ["python", "developers", "build", "reliable", "services"]

def test_key_topics_exclude_stop_words_and_short_words():
    messages = [
        {"role": "user", "content": "However these things whatever always actually, the cat sat."},
        {"role": "agent", "content": "Scalability concerns: databases, caching, queues, sharding, indexes, replicas"},
    ]
    analysis = analyze_conversation(messages)
    assert len(analysis.key_topics) <= 5
    for word in analysis.key_topics:
        assert len(word) > 3
        assert word not in STOP_WORDS

def test_rarer_words_rank_higher():
    contents = [
        "python testing frameworks",
        "python deployment",
        "python monitoring",
    ]
    topics = extract_key_topics(contents)
    assert topics[-1] == "python"
    assert topics[0] == "testing"

def test_punctuation_and_underscores_stripped():
    topics = extract_key_topics(["snake_case api-gateway!!"])
    assert topics == ["snakecase", "apigateway"]

@pytest.mark.parametrize("contents, expected", [
    (["That was great work"], "positive"),
    (["That was terrible"], "negative"),
    (["Good answer but a bad attitude"], "neutral"),
    (["goodbye"], "positive"),
    (["great great great", "terrible and awful"], "negative"),
    (["Nothing notable"], "neutral"),
])
def test_score_sentiment(contents, expected):
    assert score_sentiment(contents) == expected

def test_sentiment_ignores_system_messages():
    messages = [
        {"role": "system", "content": "terrible awful"},
        {"role": "user", "content": "Excellent question"},
    ]
    assert analyze_conversation(messages).sentiment == "positive"

def test_duration_from_timestamps():
    messages = [
        {"role": "agent", "content": "Welcome", "timestamp": "2025-01-01T10:00:00Z"},
        {"role": "user", "content": "Thanks", "timestamp": "2025-01-01T10:02:30Z"},
    ]
    assert analyze_conversation(messages).duration == 150

def test_duration_uses_all_messages():
    messages = [
        {"role": "system", "content": "Recording", "timestamp": "2025-01-01T09:59:00Z"},
        {"role": "agent", "content": "Welcome", "timestamp": "2025-01-01T10:00:00Z"},
        {"role": "user", "content": "Thanks", "timestamp": "2025-01-01T10:02:30Z"},
        {"timestamp": "2025-01-01T10:03:00Z"},
    ]
    assert analyze_conversation(messages).duration == 240

def test_duration_is_order_independent():
    messages = [
        {"role": "user", "content": "Thanks", "timestamp": "2025-01-01T10:02:30Z"},
        {"role": "agent", "content": "Welcome", "timestamp": "2025-01-01T10:00:00Z"},
    ]
    assert analyze_conversation(messages).duration == 150

def test_duration_ignores_timespans():
    messages = [
        {"role": "agent", "content": "Welcome", "timespan": {"start": "2025-01-01T10:00:00Z", "end": "2025-01-01T10:00:05Z"}},
        {"role": "user", "content": "Thanks", "timespan": {"start": "2025-01-01T10:10:00Z", "end": "2025-01-01T10:10:05Z"}},
    ]
    assert analyze_conversation(messages).duration == 30

def test_duration_rounds_half_up():
    messages = [
        {"timestamp": "2025-01-01T10:00:00Z"},
        {"timestamp": "2025-01-01T10:00:01.500Z"},
    ]
    assert calculate_duration(messages, 1) == 2

def test_duration_fallbacks():
    same_time = [
        {"timestamp": "2025-01-01T10:00:00Z"},
        {"timestamp": "2025-01-01T10:00:00Z"},
    ]
    assert calculate_duration(same_time, 2) == 30
    assert calculate_duration([{"timestamp": "2025-01-01T10:00:00Z"}], 3) == 45
    assert calculate_duration([{"timestamp": "not a date"}, {}], 4) == 60

def test_parse_timestamp():
    assert parse_timestamp("2025-01-01T00:00:00Z") == parse_timestamp("2025-01-01T00:00:00")
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp({"start": 1}) is None

def test_idempotent_and_does_not_mutate(interview_messages):
    snapshot = copy.deepcopy(interview_messages)
    first = analyze_conversation(interview_messages)
    second = analyze_conversation(copy.deepcopy(interview_messages))
    assert first == second
    assert analyze_conversation(interview_messages) == first
    assert interview_messages == snapshot

def test_analysis_is_frozen(interview_messages):
    analysis = analyze_conversation(interview_messages)
    assert isinstance(analysis, ConversationAnalysis)
    with pytest.raises(ValidationError):
        analysis.sentiment = "negative"
