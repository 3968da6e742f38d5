# db_io.py
"""
Session and interaction storage.

Provides:
- Session
- MemorySessionStore / DynamoSessionStore (session id -> Messenger recipient id)
- MemoryInteractionStore / DynamoInteractionStore (inbound/outbound audit trail)
- build_session_store / build_interaction_store

The in-memory stores are used whenever no DynamoDB table name is configured.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Deque, Dict, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

logger = logging.getLogger("db_io")


def now_ts() -> float:
    return time.time()


def iso_timestamp(ts: Optional[float] = None) -> str:
    value = datetime.fromtimestamp(ts or now_ts(), tz=timezone.utc)
    return value.isoformat()


def new_session_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Session:
    session_id: str
    recipient_id: str
    created_at: str = field(default_factory=lambda: iso_timestamp())

    def to_item(self, key: str) -> Dict[str, Any]:
        return {
            "pk": key,
            "session_id": self.session_id,
            "recipient_id": self.recipient_id,
            "created_at": self.created_at,
        }

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Session":
        return cls(
            session_id=item["session_id"],
            recipient_id=item["recipient_id"],
            created_at=item.get("created_at", iso_timestamp()),
        )


class MemorySessionStore:
    """Process-local session table."""

    backend = "memory"

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._by_recipient: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def find_or_create(self, recipient_id: str) -> Session:
        with self._lock:
            session = self._by_recipient.get(recipient_id)
            if session:
                return session
            session = Session(session_id=new_session_id(), recipient_id=recipient_id)
            self._sessions[session.session_id] = session
            self._by_recipient[recipient_id] = session
        logger.info("Created session %s for recipient %s", session.session_id, recipient_id)
        return session

    def recipient_for(self, session_id: str) -> Optional[str]:
        with self._lock:
            session = self._sessions.get(session_id)
        return session.recipient_id if session else None

    def count(self) -> Optional[int]:
        return len(self._sessions)


def session_key(session_id: str) -> str:
    return f"session#{session_id}"


def recipient_key(recipient_id: str) -> str:
    return f"recipient#{recipient_id}"


class DynamoSessionStore:
    """
    Persist sessions to DynamoDB (hash key: pk).

    Each session is written twice: under ``session#<session_id>`` for
    recipient lookups by the bot actions, and under ``recipient#<recipient_id>``
    for find-or-create on inbound messages. The recipient item is written with
    a conditional put, so concurrent first messages from one sender agree on a
    single session.
    """

    backend = "dynamodb"

    def __init__(self, table_name: str, region: str):
        self.table_name = table_name
        self.region = region
        resource = boto3.resource("dynamodb", region_name=region)
        self._table = resource.Table(table_name)

    def _get(self, key: str, consistent: bool = False) -> Optional[Session]:
        try:
            response = self._table.get_item(Key={"pk": key}, ConsistentRead=consistent)
        except Exception:
            logger.exception("Dynamo session get failed")
            raise
        item = response.get("Item")
        return Session.from_item(item) if item else None

    def find_by_recipient(self, recipient_id: str) -> Optional[Session]:
        return self._get(recipient_key(recipient_id), consistent=True)

    def find_or_create(self, recipient_id: str) -> Session:
        session = self.find_by_recipient(recipient_id)
        if session:
            return session
        session = Session(session_id=new_session_id(), recipient_id=recipient_id)
        try:
            self._table.put_item(Item=session.to_item(session_key(session.session_id)))
            self._table.put_item(
                Item=session.to_item(recipient_key(recipient_id)),
                ConditionExpression=Attr("pk").not_exists(),
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != "ConditionalCheckFailedException":
                logger.exception("Dynamo session put failed")
                raise
            # Another request created the session first.
            self._table.delete_item(Key={"pk": session_key(session.session_id)})
            existing = self.find_by_recipient(recipient_id)
            if existing is None:
                raise
            return existing
        logger.info("Created session %s for recipient %s", session.session_id, recipient_id)
        return session

    def recipient_for(self, session_id: str) -> Optional[str]:
        session = self._get(session_key(session_id))
        return session.recipient_id if session else None

    def count(self) -> Optional[int]:
        # Unknown without a table scan.
        return None


class MemoryInteractionStore:
    """Keeps the most recent interactions in memory."""

    backend = "memory"

    def __init__(self, max_items: int = 1000):
        self.items: Deque[Dict[str, Any]] = deque(maxlen=max_items)

    def put(self, recipient_id: str, direction: str, category: str, payload: Dict[str, Any]) -> None:
        self.items.append(_interaction_item(recipient_id, direction, category, payload))

    def count(self) -> Optional[int]:
        return len(self.items)


class DynamoInteractionStore:
    """Persist inbound/outbound interactions for auditing (hash key: recipient_id, range key: timestamp)."""

    backend = "dynamodb"

    def __init__(self, table_name: str, region: str):
        self.table_name = table_name
        self.region = region
        resource = boto3.resource("dynamodb", region_name=region)
        self._table = resource.Table(table_name)

    def put(self, recipient_id: str, direction: str, category: str, payload: Dict[str, Any]) -> None:
        item = normalize_decimals(_interaction_item(recipient_id, direction, category, payload))
        try:
            self._table.put_item(Item=item)
        except Exception:
            logger.exception("Dynamo interaction put failed")
            raise

    def count(self) -> Optional[int]:
        return None


def _interaction_item(recipient_id: str, direction: str, category: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    timestamp = iso_timestamp()
    return {
        "recipient_id": recipient_id,
        "timestamp": timestamp,
        "direction": direction,
        "category": category,
        "payload": payload,
    }


def normalize_decimals(data):
    if isinstance(data, float):
        return Decimal(str(data))
    elif isinstance(data, dict):
        return {k: normalize_decimals(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [normalize_decimals(v) for v in data]
    return data


def build_session_store(table_name: Optional[str], region: str):
    if table_name:
        return DynamoSessionStore(table_name, region)
    return MemorySessionStore()


def build_interaction_store(table_name: Optional[str], region: str):
    if table_name:
        return DynamoInteractionStore(table_name, region)
    return MemoryInteractionStore()
