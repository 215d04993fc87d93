from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, List, Optional

from loguru import logger

from brainvault.core.gateway import ClassificationGateway
from brainvault.core.interfaces import is_error
from brainvault.core.models import StoredDocument, WeeklySummary
from brainvault.core.prompts import DAILY_TEMPLATE, WEEKLY_TEMPLATE, TemplateLoader, render
from brainvault.core.synthesis import DEFAULT_DAILY_LIMIT, Synthesizer

ALL_CAUGHT_UP = "No actionable items found for today. You're all caught up!"
NO_CAPTURES_THIS_WEEK = "No captures this week. Start capturing thoughts with /capture!"
DAILY_FAILED = "Failed to generate daily digest. Please try again later."
WEEKLY_FAILED = "Failed to generate weekly review. Please try again later."


class DigestGenerator:
    def __init__(
        self,
        gateway: ClassificationGateway,
        synthesizer: Synthesizer,
        templates: Optional[TemplateLoader] = None,
        daily_limit: int = DEFAULT_DAILY_LIMIT,
        now: Callable[[], datetime] = datetime.now,
        log: Optional[Any] = None,
    ) -> None:
        self.gateway = gateway
        self.synthesizer = synthesizer
        self.templates = templates or gateway.templates
        self.daily_limit = daily_limit
        self.now = now
        self.log = log or logger.bind(component="digest")

    def generate_daily_digest(self) -> str:
        actions = self.synthesizer.get_daily_actions(self.daily_limit)
        if not actions:
            return ALL_CAUGHT_UP

        prompt = render(
            self.templates.get(DAILY_TEMPLATE),
            LIMIT=str(self.daily_limit),
            DATE=self._today(),
            ITEMS=format_actions(actions),
        )
        response = self.gateway.narrate(prompt)
        if is_error(response):
            self.log.warning("Reasoning service error during daily digest: {}", response)
            return DAILY_FAILED
        return response

    def generate_weekly_review(self) -> str:
        summary = self.synthesizer.get_weekly_summary()
        if summary.total_captures == 0:
            return NO_CAPTURES_THIS_WEEK

        prompt = render(
            self.templates.get(WEEKLY_TEMPLATE),
            DATE=self._today(),
            SUMMARY=format_summary(summary),
        )
        response = self.gateway.narrate(prompt)
        if is_error(response):
            self.log.warning("Reasoning service error during weekly review: {}", response)
            return WEEKLY_FAILED
        return response

    def _today(self) -> str:
        return self.now().date().isoformat()


def format_actions(actions: List[StoredDocument]) -> str:
    blocks = []
    for doc in actions:
        parts = [f"- **{doc.title}** [{doc.category}]"]
        for key, label in (
            ("status", "Status"),
            ("next_action", "Next"),
            ("follow_ups", "Follow-up"),
            ("due_date", "Due"),
        ):
            if doc.meta(key):
                parts.append(f"  {label}: {doc.meta(key)}")
        blocks.append("\n".join(parts))
    return "\n\n".join(blocks)


def format_summary(summary: WeeklySummary) -> str:
    categories = ", ".join(f"{name}: {count}" for name, count in summary.by_category.items())
    lines = [
        f"Total captures: {summary.total_captures}",
        f"Categories: {categories}",
        f"Average confidence: {summary.avg_confidence:.2f}",
        f"Needs review: {summary.needs_review_count}",
    ]
    if summary.active_projects:
        lines.append("\nActive Projects:")
        lines.extend(f"- {p.title} ({p.status or 'active'})" for p in summary.active_projects)
    if summary.people_followups:
        lines.append("\nPeople Follow-ups:")
        lines.extend(f"- {p.title}: {p.follow_ups}" for p in summary.people_followups)
    return "\n".join(lines)
