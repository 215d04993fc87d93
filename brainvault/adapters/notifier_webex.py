from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Optional

from brainvault.core.interfaces import Notifier


class WebexNotifier(Notifier):
    def __init__(self, token: str, room_id: Optional[str] = None) -> None:
        self.token = token
        self.room_id = room_id

    def deliver(self, destination_id: str, text: str) -> dict:
        url = "https://webexapis.com/v1/messages"
        payload = json.dumps({"roomId": destination_id or self.room_id, "markdown": text}).encode("utf-8")
        request = urllib.request.Request(url, data=payload, method="POST")
        request.add_header("Authorization", f"Bearer {self.token}")
        request.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=8) as response:
                return json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            body = exc.read().decode("utf-8") if exc.fp else ""
            raise RuntimeError(f"Webex HTTP {exc.code}: {body}") from exc
