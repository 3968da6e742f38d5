# messenger_messaging.py
"""
Facebook Messenger Send API helper class.

Provides:
- send_text

This class uses the Graph API endpoint:
https://graph.facebook.com/{api_version}/me/messages?access_token={page_token}
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger("messenger_messaging")


class MessengerError(RuntimeError):
    """Raised when the Send API rejects a message or cannot be reached."""


class MessengerClient:
    def __init__(self, page_token: Optional[str], api_version: str = "v2.6", timeout: float = 10):
        self.page_token = page_token
        self.api_version = api_version
        self.timeout = timeout
        self.base_url = f"https://graph.facebook.com/{api_version}/me/messages"

    @property
    def enabled(self) -> bool:
        return bool(self.page_token)

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.enabled:
            logger.info("[dry-run] %s", json.dumps(payload, indent=2, ensure_ascii=False))
            return {}
        try:
            response = requests.post(
                self.base_url,
                params={"access_token": self.page_token},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise MessengerError(f"Send API request failed: {exc}") from exc
        try:
            body = response.json()
        except ValueError:
            body = {}
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            raise MessengerError(error["message"])
        if error:
            raise MessengerError(str(error))
        if not response.ok:
            logger.error("Messenger send failed - status=%s body=%s", response.status_code, response.text)
            raise MessengerError(f"Send API returned HTTP {response.status_code}")
        return body

    def send_text(self, recipient_id: str, text: str) -> Dict[str, Any]:
        payload = {"recipient": {"id": recipient_id}, "message": {"text": text}}
        return self._post(payload)
