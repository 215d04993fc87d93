from __future__ import annotations

import os
from typing import Dict, List, Optional

CLASSIFY_TEMPLATE = "classify.txt"
DAILY_TEMPLATE = "daily_digest.txt"
WEEKLY_TEMPLATE = "weekly_review.txt"

BUILTIN_TEMPLATES: Dict[str, str] = {
    CLASSIFY_TEMPLATE: (
        "Classify this thought into one of: people, projects, ideas, admin. "
        "Return ONLY JSON with category, confidence, reasoning, extracted_data.\n\n"
        "Thought: {{THOUGHT}}"
    ),
    DAILY_TEMPLATE: (
        "Generate a daily digest for {{DATE}}. Top {{LIMIT}} actions:\n\n"
        "{{ITEMS}}\n\nFormat for chat with markdown."
    ),
    WEEKLY_TEMPLATE: (
        "Generate a weekly review for week ending {{DATE}}.\n\n"
        "{{SUMMARY}}\n\nFormat for chat with markdown."
    ),
}


class TemplateLoader:
    """Resolves prompt templates once per process.

    Lookup order: configured directory, ``./prompts`` in the working
    directory, then the built-in string.
    """

    def __init__(self, templates_dir: Optional[str] = None, fallback_dir: Optional[str] = None) -> None:
        self.templates_dir = templates_dir
        self.fallback_dir = fallback_dir if fallback_dir is not None else os.path.join(os.getcwd(), "prompts")
        self._cache: Dict[str, str] = {}

    def get(self, name: str) -> str:
        if name not in self._cache:
            self._cache[name] = self._resolve(name)
        return self._cache[name]

    def _resolve(self, name: str) -> str:
        for directory in self._candidates():
            path = os.path.join(directory, name)
            try:
                with open(path, "r", encoding="utf-8") as handle:
                    content = handle.read()
            except OSError:
                continue
            if content.strip():
                return content
        return BUILTIN_TEMPLATES.get(name, "")

    def _candidates(self) -> List[str]:
        return [d for d in (self.templates_dir, self.fallback_dir) if d]


def render(template: str, **values: str) -> str:
    for key, value in values.items():
        template = template.replace("{{" + key + "}}", value)
    return template
