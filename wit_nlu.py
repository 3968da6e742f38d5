# wit_nlu.py
"""
Wit.ai client for the /message endpoint.

Wit extracts entities from free text; the bot only cares about which entity
names come back, not their values or confidences.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import requests

logger = logging.getLogger("wit_nlu")

WIT_API_HOST = "https://api.wit.ai"


class WitError(RuntimeError):
    """Raised when Wit cannot classify a message."""


@dataclass
class Classification:
    text: str
    msg_id: Optional[str] = None
    entities: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    @classmethod
    def from_response(cls, text: str, data: Dict[str, Any]) -> "Classification":
        return cls(
            text=data.get("_text") or data.get("text") or text,
            msg_id=data.get("msg_id"),
            entities=data.get("entities") or {},
        )

    def entity_names(self) -> List[str]:
        # Newer API versions key entities as "name:role".
        return [key.split(":", 1)[0] for key in self.entities]

    def single_entity_name(self) -> Optional[str]:
        names = self.entity_names()
        return names[0] if len(names) == 1 else None


class WitClient:
    def __init__(
        self,
        access_token: Optional[str],
        api_version: str = "20170307",
        actions: Optional[Dict[str, Callable[..., Any]]] = None,
        timeout: float = 10,
    ):
        self.access_token = access_token
        self.api_version = api_version
        self.actions = dict(actions or {})
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.access_token)

    def message(self, text: str) -> Classification:
        if not self.enabled:
            raise WitError("WIT_AI_SERVER_TOKEN is not configured")
        headers = {"Authorization": f"Bearer {self.access_token}", "Accept": "application/json"}
        params = {"v": self.api_version, "q": text}
        logger.debug("Wit /message q=%r", text)
        try:
            response = requests.get(f"{WIT_API_HOST}/message", params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise WitError(f"Wit request failed: {exc}") from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise WitError(f"Wit returned a non-JSON body (HTTP {response.status_code})") from exc
        if not isinstance(data, dict):
            raise WitError("Wit returned an unexpected body")
        if "error" in data:
            raise WitError(f"Wit responded with an error: {data['error']}")
        if not response.ok:
            raise WitError(f"Wit returned HTTP {response.status_code}")
        return Classification.from_response(text, data)

    def run_action(self, name: str, session_id: str, text: str) -> Any:
        action = self.actions.get(name)
        if action is None:
            raise WitError(f"No action registered with name: {name}")
        return action(session_id, text)
