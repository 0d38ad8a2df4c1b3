import pytest
import requests

from tarot_reader.client import InterpretationClient, InterpretationError
from tarot_reader.logic import perform_draw


class FakeResponse:
    def __init__(self, status_code, body=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeHTTP:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        if self.error:
            raise self.error
        return self.response


def make_client(**kwargs):
    http = FakeHTTP(**kwargs)
    return InterpretationClient("http://test/api/interpret", timeout=5, session=http), http


def test_posts_session_payload():
    client, http = make_client(response=FakeResponse(200, {"text": "All is well."}))
    session = perform_draw("q", "three")
    assert client.interpret(session) == "All is well."
    url, body, timeout = http.posts[0]
    assert url == "http://test/api/interpret"
    assert body == session.to_payload()
    assert timeout == 5


def test_server_error_uses_error_field():
    client, _ = make_client(response=FakeResponse(400, {"error": "No cards provided."}))
    with pytest.raises(InterpretationError) as exc:
        client.interpret(perform_draw("q", "single"))
    assert exc.value.status == 400
    assert exc.value.message == "Server error 400: No cards provided."


def test_server_error_without_json():
    client, _ = make_client(response=FakeResponse(500))
    with pytest.raises(InterpretationError) as exc:
        client.interpret(perform_draw("q", "single"))
    assert exc.value.message == "Server error 500: Unknown error"


def test_error_in_ok_body():
    client, _ = make_client(response=FakeResponse(200, {"error": "upstream said no"}))
    with pytest.raises(InterpretationError) as exc:
        client.interpret(perform_draw("q", "single"))
    assert exc.value.message == "upstream said no"


@pytest.mark.parametrize("body", [{"text": ""}, {"text": "  "}, {}, {"text": 42}])
def test_empty_text(body):
    client, _ = make_client(response=FakeResponse(200, body))
    with pytest.raises(InterpretationError) as exc:
        client.interpret(perform_draw("q", "single"))
    assert exc.value.message == "Empty response from API."


def test_network_failure():
    client, _ = make_client(error=requests.ConnectionError("connection refused"))
    with pytest.raises(InterpretationError) as exc:
        client.interpret(perform_draw("q", "single"))
    assert "connection refused" in exc.value.message
    assert exc.value.status is None
