# chatbot.py
"""
Messenger HIV/AIDS FAQ bot.

- Receives Messenger page webhook events.
- Forwards the message text to Wit.ai and expects exactly one entity back.
- Replies with the canned answer for that entity (see responses.py), or with
  the helpline fallback when Wit is unsure.
- Integrates with:
    - wit_nlu.WitClient
    - messenger_messaging.MessengerClient
    - db_io session / interaction stores
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from mangum import Mangum
from pydantic import BaseModel, Field

from db_io import build_interaction_store, build_session_store
from messenger_messaging import MessengerClient, MessengerError
from responses import FALLBACK_MESSAGE, message_for_entity
from wit_nlu import Classification, WitClient, WitError

# --- Configuration & logging ---
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger("faqbot.chatbot")

app = FastAPI(title="HIV/AIDS FAQ Messenger Bot", version="1.0.0")
_lambda_adapter = Mangum(app)

# Environment / defaults
FB_PAGE_ACCESS_TOKEN = os.getenv("FB_PAGE_ACCESS_TOKEN")
FB_HUB_VERIFY_TOKEN = os.getenv("FB_HUB_VERIFY_TOKEN")
FB_GRAPH_API_VERSION = os.getenv("FB_GRAPH_API_VERSION", "v2.6")
WIT_AI_SERVER_TOKEN = os.getenv("WIT_AI_SERVER_TOKEN")
WIT_API_VERSION = os.getenv("WIT_API_VERSION", "20170307")
SESSION_TABLE_NAME = os.getenv("SESSION_TABLE_NAME")
INTERACTION_TABLE_NAME = os.getenv("INTERACTION_TABLE_NAME")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

messenger = MessengerClient(FB_PAGE_ACCESS_TOKEN, FB_GRAPH_API_VERSION)
sessions = build_session_store(SESSION_TABLE_NAME, AWS_REGION)
interaction_store = build_interaction_store(INTERACTION_TABLE_NAME, AWS_REGION)

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class Participant(BaseModel):
    id: str


class MessengerMessage(BaseModel):
    mid: Optional[str] = None
    text: Optional[str] = None


class MessagingEvent(BaseModel):
    sender: Participant
    recipient: Optional[Participant] = None
    timestamp: Optional[int] = None
    message: Optional[MessengerMessage] = None

    @property
    def text(self) -> Optional[str]:
        return self.message.text if self.message else None


class WebhookEntry(BaseModel):
    id: Optional[str] = None
    time: Optional[int] = None
    messaging: List[MessagingEvent] = Field(default_factory=list)


class WebhookPayload(BaseModel):
    object: Optional[str] = None
    entry: List[WebhookEntry] = Field(default_factory=list)

    def events(self) -> List[MessagingEvent]:
        return [event for entry in self.entry for event in entry.messaging]

# ---------------------------------------------------------------------------
# Persistence & interaction helpers
# ---------------------------------------------------------------------------

def record_interaction(recipient_id: str, direction: str, category: str, payload: Optional[Dict[str, Any]] = None) -> None:
    payload = payload or {}
    try:
        interaction_store.put(recipient_id, direction, category, payload)
    except Exception:
        logger.exception("Failed to record interaction")

# ---------------------------------------------------------------------------
# Messenger Send API
# ---------------------------------------------------------------------------

def send_text_to_user(recipient_id: str, text: str) -> None:
    message_data = {"text": text}
    try:
        messenger.send_text(recipient_id, text)
    except MessengerError as exc:
        logger.error("Error sending message to %s: %s", recipient_id, exc)
        return
    logger.info("Sent text message to user %s", recipient_id)
    logger.info("Message %s", message_data)
    record_interaction(recipient_id, "outbound", "text", message_data)

# ---------------------------------------------------------------------------
# Wit.ai bot actions
# ---------------------------------------------------------------------------

def session_send(session_id: str, text: str) -> None:
    """Deliver a bot response to the Messenger user that owns ``session_id``."""
    try:
        recipient_id = sessions.recipient_for(session_id)
    except Exception:
        logger.exception("Oops! Session lookup failed for session: %s", session_id)
        return None
    if not recipient_id:
        logger.error("Oops! Couldn't find user for session: %s", session_id)
        return None
    try:
        messenger.send_text(recipient_id, text)
    except MessengerError as exc:
        logger.error("Oops! An error occurred while forwarding the response to %s: %s", recipient_id, exc)
        return None
    record_interaction(recipient_id, "outbound", "session_send", {"session_id": session_id, "text": text})
    return None


wit_client = WitClient(WIT_AI_SERVER_TOKEN, WIT_API_VERSION, actions={"send": session_send})

# ---------------------------------------------------------------------------
# Relay pipeline
# ---------------------------------------------------------------------------

def reply_for_classification(classification: Classification, original_message: str) -> str:
    entity_count = len(classification.entities)
    if entity_count != 1:
        logger.info(
            'Context entities for message "%s" does not equal 1 (got %d) for context: %s',
            original_message,
            entity_count,
            classification,
        )
        return FALLBACK_MESSAGE
    entity_name = classification.single_entity_name()
    logger.info("Will send message for entity with name: %s", entity_name)
    return message_for_entity(entity_name) or FALLBACK_MESSAGE


def handle_classification(classification: Classification, sender_id: str, original_message: str) -> None:
    reply = reply_for_classification(classification, original_message)
    send_text_to_user(sender_id, reply)


def forward_event(event: MessagingEvent) -> None:
    text = event.text
    if not text:
        logger.info("There was no event message! Did not forward to Wit")
        return
    sender_id = event.sender.id
    session = sessions.find_or_create(sender_id)
    record_interaction(sender_id, "inbound", "text", {"mid": event.message.mid, "text": text, "session_id": session.session_id})
    try:
        classification = wit_client.message(text)
    except WitError as exc:
        logger.error("Oops! Got an error from Wit: %s", exc)
        return
    handle_classification(classification, sender_id, text)

# ---------------------------------------------------------------------------
# HTTP endpoints
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info("%s %s %s", response.status_code, request.method, request.url.path)
    return response


@app.get("/")
def index():
    return PlainTextResponse("Hello world, I am a chat bot")


@app.get("/webhook")
def verify_webhook(hub_mode: Optional[str] = Query(default=None, alias="hub.mode"), hub_verify_token: Optional[str] = Query(default=None, alias="hub.verify_token"), hub_challenge: Optional[str] = Query(default=None, alias="hub.challenge")):
    if FB_HUB_VERIFY_TOKEN and hub_verify_token == FB_HUB_VERIFY_TOKEN:
        return PlainTextResponse(hub_challenge or "")
    logger.warning("Webhook verification failed (mode=%s)", hub_mode)
    return PlainTextResponse("Error, wrong token", status_code=403)


@app.post("/webhook")
def receive_webhook(payload: WebhookPayload):
    events = payload.events()
    if not events:
        return JSONResponse({"status": "ignored"})
    logger.info("Received messaging events at webhook: %s", events)
    for event in events:
        try:
            forward_event(event)
        except Exception:
            logger.exception("Failed to process messaging event from %s", event.sender.id)
    return JSONResponse({"status": "processed"})


@app.get("/healthz")
def healthcheck():
    return {
        "status": "ok",
        "messenger_enabled": messenger.enabled,
        "wit_enabled": wit_client.enabled,
        "session_backend": sessions.backend,
        "interaction_backend": interaction_store.backend,
        "session_count": sessions.count(),
        "interaction_count": interaction_store.count(),
    }

# ---------------------------------------------------------------------------
# Local runner
# ---------------------------------------------------------------------------

def run():
    import uvicorn
    uvicorn.run("chatbot:app", host="0.0.0.0", port=int(os.environ.get("PORT", 5000)), reload=bool(int(os.environ.get("RELOAD", "0"))))


def lambda_handler(event, context):
    return _lambda_adapter(event, context)


if __name__ == "__main__":
    run()
