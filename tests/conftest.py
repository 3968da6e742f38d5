"""Pytest configuration and shared fixtures."""

import os

# The app builds its stores at import time; keep them in memory for tests.
os.environ.pop("SESSION_TABLE_NAME", None)
os.environ.pop("INTERACTION_TABLE_NAME", None)

import pytest
from fastapi.testclient import TestClient

import chatbot
from db_io import MemoryInteractionStore, MemorySessionStore
from messenger_messaging import MessengerError
from wit_nlu import Classification, WitError


class FakeMessenger:
    """Records outgoing messages instead of calling the Send API."""

    enabled = True

    def __init__(self):
        self.sent = []
        self.error = None

    def send_text(self, recipient_id, text):
        if self.error:
            raise MessengerError(self.error)
        self.sent.append((recipient_id, text))
        return {"recipient_id": recipient_id, "message_id": "mid.%d" % len(self.sent)}


class FakeWit:
    """Returns canned entity maps keyed by message text."""

    enabled = True

    def __init__(self):
        self.entities_by_text = {}
        self.error = None
        self.calls = []

    def message(self, text):
        self.calls.append(text)
        if self.error:
            raise WitError(self.error)
        return Classification(text=text, entities=self.entities_by_text.get(text, {}))


@pytest.fixture
def fake_messenger(monkeypatch):
    messenger = FakeMessenger()
    monkeypatch.setattr(chatbot, "messenger", messenger)
    return messenger


@pytest.fixture
def fake_wit(monkeypatch):
    wit = FakeWit()
    monkeypatch.setattr(chatbot, "wit_client", wit)
    return wit


@pytest.fixture
def session_store(monkeypatch):
    store = MemorySessionStore()
    monkeypatch.setattr(chatbot, "sessions", store)
    return store


@pytest.fixture
def interactions(monkeypatch):
    store = MemoryInteractionStore()
    monkeypatch.setattr(chatbot, "interaction_store", store)
    return store


@pytest.fixture
def client(monkeypatch, fake_messenger, fake_wit, session_store, interactions):
    monkeypatch.setattr(chatbot, "FB_HUB_VERIFY_TOKEN", "verify-me")
    return TestClient(chatbot.app)


def messenger_payload(*events):
    """Build a page webhook body carrying the given messaging events."""
    return {"object": "page", "entry": [{"id": "PAGE_ID", "time": 1458692752478, "messaging": list(events)}]}


def text_event(sender_id, text, mid="mid.1457764197618:41d102a3e1ae206a38"):
    return {
        "sender": {"id": sender_id},
        "recipient": {"id": "PAGE_ID"},
        "timestamp": 1458692752478,
        "message": {"mid": mid, "text": text},
    }
