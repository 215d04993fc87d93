from __future__ import annotations

import json
import urllib.parse
import urllib.request
from typing import Optional

from brainvault.core.interfaces import Notifier


class SlackNotifier(Notifier):
    def __init__(self, token: str, channel_id: Optional[str] = None) -> None:
        self.token = token
        self.channel_id = channel_id

    def deliver(self, destination_id: str, text: str) -> dict:
        url = "https://slack.com/api/chat.postMessage"
        channel = destination_id or self.channel_id
        payload = urllib.parse.urlencode({"channel": channel, "text": text}).encode("utf-8")
        request = urllib.request.Request(url, data=payload, method="POST")
        request.add_header("Authorization", f"Bearer {self.token}")
        request.add_header("Content-Type", "application/x-www-form-urlencoded")
        with urllib.request.urlopen(request, timeout=8) as response:
            data = json.loads(response.read().decode("utf-8"))
        if not data.get("ok"):
            raise RuntimeError(f"Slack error: {data.get('error', 'unknown')}")
        return data
