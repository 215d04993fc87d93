from __future__ import annotations

import json
import os
import ssl
import time
import urllib.error
import urllib.request
from typing import Optional

from loguru import logger

from brainvault.core.interfaces import ERROR_PREFIX, ReasoningService


class AnthropicProvider(ReasoningService):
    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20240620",
        ca_bundle: Optional[str] = None,
        max_retries: int = 3,
        retry_backoff: float = 1.5,
        max_tokens: int = 1024,
        timeout: float = 60,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.ca_bundle = ca_bundle or os.environ.get("SSL_CERT_FILE")
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.max_tokens = max_tokens
        self.timeout = timeout

    def complete(self, prompt: str) -> str:
        try:
            payload = self._chat(prompt)
        except (RuntimeError, OSError, ValueError) as exc:
            logger.error("Anthropic call failed: {}", exc)
            return f"{ERROR_PREFIX} {exc}"
        blocks = payload.get("content") or [{}]
        return str(blocks[0].get("text", "")).strip()

    def _chat(self, prompt: str) -> dict:
        url = "https://api.anthropic.com/v1/messages"
        body = json.dumps(
            {
                "model": self.model,
                "max_tokens": self.max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            }
        ).encode("utf-8")
        request = urllib.request.Request(url, data=body, method="POST")
        request.add_header("x-api-key", self.api_key)
        request.add_header("anthropic-version", "2023-06-01")
        request.add_header("Content-Type", "application/json")
        context = None
        if self.ca_bundle and os.path.exists(self.ca_bundle):
            context = ssl.create_default_context(cafile=self.ca_bundle)
        for attempt in range(self.max_retries + 1):
            try:
                with urllib.request.urlopen(request, context=context, timeout=self.timeout) as response:
                    return json.loads(response.read().decode("utf-8"))
            except urllib.error.HTTPError as exc:
                if exc.code == 429 and attempt < self.max_retries:
                    time.sleep(self.retry_backoff * (2**attempt))
                    continue
                body = exc.read().decode("utf-8") if exc.fp else ""
                raise RuntimeError(f"Anthropic HTTP {exc.code}: {body}") from exc
        raise RuntimeError("Anthropic retries exhausted")
