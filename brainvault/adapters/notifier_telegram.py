from __future__ import annotations

import json
import urllib.error
import urllib.request

from brainvault.core.interfaces import Notifier

MAX_MESSAGE_LENGTH = 4096


class TelegramNotifier(Notifier):
    """Sends digests through the Telegram Bot API ``sendMessage`` method."""

    def __init__(self, bot_token: str, parse_mode: str = "Markdown") -> None:
        self.bot_token = bot_token
        self.parse_mode = parse_mode

    def deliver(self, destination_id: str, text: str) -> list:
        results = []
        for chunk in _chunks(text, MAX_MESSAGE_LENGTH):
            results.append(self._send(destination_id, chunk))
        return results

    def _send(self, chat_id: str, text: str) -> dict:
        url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text}
        if self.parse_mode:
            payload["parse_mode"] = self.parse_mode
        request = urllib.request.Request(url, data=json.dumps(payload).encode("utf-8"), method="POST")
        request.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=8) as response:
                data = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            body = exc.read().decode("utf-8") if exc.fp else ""
            raise RuntimeError(f"Telegram HTTP {exc.code}: {body}") from exc
        if not data.get("ok"):
            raise RuntimeError(f"Telegram error: {data.get('description', 'unknown')}")
        return data


def _chunks(text: str, size: int) -> list:
    if len(text) <= size:
        return [text]
    chunks = []
    remaining = text
    while remaining:
        if len(remaining) <= size:
            chunks.append(remaining)
            break
        cut = remaining.rfind("\n", 0, size)
        if cut <= 0:
            cut = size
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    return chunks
