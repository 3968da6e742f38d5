import pytest
import requests

import wit_nlu
from wit_nlu import Classification, WitClient, WitError


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class Recorder(list):
    response = None


@pytest.fixture
def fetched(monkeypatch):
    calls = Recorder()

    def fake_get(url, **kwargs):
        calls.append((url, kwargs))
        return calls.response

    calls.response = FakeResponse(body={
        "_text": "is there a cure?",
        "msg_id": "0y3Ke1W1a3ESkfFCq",
        "entities": {"is_there_a_cure_for_hiv_or_aids": [{"confidence": 0.95, "value": "true"}]},
    })
    monkeypatch.setattr(wit_nlu.requests, "get", fake_get)
    return calls


def test_message_returns_classification(fetched):
    result = WitClient("server-token").message("is there a cure?")
    assert result.msg_id == "0y3Ke1W1a3ESkfFCq"
    assert result.single_entity_name() == "is_there_a_cure_for_hiv_or_aids"
    url, kwargs = fetched[0]
    assert url == "https://api.wit.ai/message"
    assert kwargs["params"] == {"v": "20170307", "q": "is there a cure?"}
    assert kwargs["headers"]["Authorization"] == "Bearer server-token"


def test_error_field_raises(fetched):
    fetched.response = FakeResponse(status_code=400, body={"error": "Bad auth, check token/params", "code": "no-auth"})
    with pytest.raises(WitError, match="Bad auth"):
        WitClient("server-token").message("hi")


def test_non_json_body_raises(fetched):
    fetched.response = FakeResponse(status_code=502)
    with pytest.raises(WitError, match="HTTP 502"):
        WitClient("server-token").message("hi")


def test_transport_error_raises(monkeypatch):
    def fake_get(url, **kwargs):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(wit_nlu.requests, "get", fake_get)
    with pytest.raises(WitError, match="read timed out"):
        WitClient("server-token").message("hi")


def test_missing_token_raises(fetched):
    with pytest.raises(WitError):
        WitClient(None).message("hi")
    assert fetched == []


def test_entity_names_strip_roles():
    result = Classification(text="x", entities={"what_is_hiv:what_is_hiv": [{}]})
    assert result.entity_names() == ["what_is_hiv"]
    assert result.single_entity_name() == "what_is_hiv"


def test_single_entity_name_requires_exactly_one():
    assert Classification(text="x").single_entity_name() is None
    assert Classification(text="x", entities={"a": [], "b": []}).single_entity_name() is None


def test_run_action_unknown_name():
    with pytest.raises(WitError, match="No action registered"):
        WitClient("token").run_action("merge", "session", "hi")
