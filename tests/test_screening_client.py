import json
from unittest.mock import MagicMock, patch

import requests

from screening import ScreeningClient, check_server_connection

ANALYSIS = {
    "totalMessages": 2,
    "agentMessages": 1,
    "customerMessages": 1,
    "duration": 75,
    "keyTopics": ["python"],
    "sentiment": "neutral",
}

def make_client():
    client = ScreeningClient(base_url="http://api.test")
    client.session = MagicMock()
    client.session.get.return_value.json.return_value = ANALYSIS
    client.session.post.return_value.json.return_value = ANALYSIS
    return client

def test_analyze_screening():
    client = make_client()
    assert client.analyze_screening("42") == ANALYSIS
    client.session.get.assert_called_once_with("http://api.test/api/v1/screenings/42/analysis")

def test_analyze_screening_request_error():
    client = make_client()
    client.session.get.side_effect = requests.exceptions.ConnectionError("down")
    assert client.analyze_screening("42") == {}

def test_analyze_file_with_envelope(tmp_path):
    path = tmp_path / "call.json"
    messages = [{"role": "agent", "content": "Hi"}]
    path.write_text(json.dumps({"success": True, "data": {"results": messages}}))
    client = make_client()
    assert client.analyze_file(str(path)) == ANALYSIS
    client.session.post.assert_called_once_with(
        "http://api.test/api/v1/conversations/analyze",
        json={"messages": messages},
    )

def test_analyze_missing_file(tmp_path):
    client = make_client()
    assert client.analyze_file(str(tmp_path / "missing.json")) == {}
    client.session.post.assert_not_called()

def test_print_analysis(capsys):
    make_client().print_analysis(ANALYSIS)
    output = capsys.readouterr().out
    assert "1m 15s" in output
    assert "python" in output

def test_check_server_connection_port_closed():
    with patch("screening.socket.socket") as mock_socket:
        mock_socket.return_value.connect_ex.return_value = 1
        assert check_server_connection() is False
