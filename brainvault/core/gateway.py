from __future__ import annotations

import json
import re
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from brainvault.core.interfaces import ReasoningService, is_error
from brainvault.core.models import Category, Classification
from brainvault.core.prompts import CLASSIFY_TEMPLATE, TemplateLoader, render
from brainvault.core.schema import AdminData, ClassificationPayload

FALLBACK_REASONING = "parse error"
FALLBACK_NAME = "unknown"

_FENCED_JSON = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?```")


class ClassificationGateway:
    def __init__(
        self,
        reasoning: ReasoningService,
        templates: Optional[TemplateLoader] = None,
        log: Optional[Any] = None,
    ) -> None:
        self.reasoning = reasoning
        self.templates = templates or TemplateLoader()
        self.log = log or logger.bind(component="gateway")

    def classify(self, thought: str) -> Classification:
        """Classify ``thought``. Any failure yields :func:`fallback_classification`."""
        prompt = render(self.templates.get(CLASSIFY_TEMPLATE), THOUGHT=thought)
        response = self.reasoning.complete(prompt)
        if is_error(response):
            self.log.warning("Reasoning service error during classification: {}", response)
            return fallback_classification(thought)

        try:
            payload = ClassificationPayload.model_validate(json.loads(extract_json(response)))
            extracted = payload.extracted()
        except (json.JSONDecodeError, ValidationError) as exc:
            self.log.warning("Failed to parse classification response: {}", exc)
            return fallback_classification(thought)

        return Classification(
            category=Category(payload.category),
            confidence=payload.confidence,
            reasoning=payload.reasoning,
            extracted=extracted,
        )

    def narrate(self, prompt: str) -> str:
        return self.reasoning.complete(prompt)


def fallback_classification(thought: str) -> Classification:
    return Classification(
        category=Category.ADMIN,
        confidence=0.0,
        reasoning=FALLBACK_REASONING,
        extracted=AdminData(name=FALLBACK_NAME, notes=thought),
    )


def extract_json(response: str) -> str:
    """Pull the JSON payload out of a model reply.

    Tries a fenced code block, then the first balanced ``{...}`` span, then
    the whole reply.
    """
    fenced = _FENCED_JSON.search(response)
    if fenced and fenced.group(1).strip():
        return fenced.group(1).strip()
    span = _balanced_object(response)
    if span is not None:
        return span
    return response.strip()


def _balanced_object(text: str) -> Optional[str]:
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None
