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


class OpenAIProvider(ReasoningService):
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        ca_bundle: Optional[str] = None,
        max_retries: int = 3,
        retry_backoff: float = 1.5,
        timeout: float = 60,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.ca_bundle = ca_bundle or os.environ.get("SSL_CERT_FILE")
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.timeout = timeout

    def complete(self, prompt: str) -> str:
        try:
            payload = self._chat([{"role": "user", "content": prompt}])
        except (RuntimeError, OSError, ValueError) as exc:
            logger.error("OpenAI call failed: {}", exc)
            return f"{ERROR_PREFIX} {exc}"
        choices = payload.get("choices") or [{}]
        return str(choices[0].get("message", {}).get("content", "")).strip()

    def _chat(self, messages: list) -> dict:
        url = "https://api.openai.com/v1/chat/completions"
        body = json.dumps({"model": self.model, "messages": messages}).encode("utf-8")
        request = urllib.request.Request(url, data=body, method="POST")
        request.add_header("Authorization", f"Bearer {self.api_key}")
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
                raise RuntimeError(f"OpenAI HTTP {exc.code}: {body}") from exc
        raise RuntimeError("OpenAI retries exhausted")
