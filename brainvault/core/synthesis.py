from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from brainvault.core.models import (
    ActiveProject,
    CaptureStats,
    Category,
    PersonFollowup,
    StoredDocument,
    WeeklySummary,
)
from brainvault.core.scanner import Scanner, is_actionable

DEFAULT_DAILY_LIMIT = 3
PRIORITY_URGENCY = re.compile(r"\b(urgent|asap|deadline|overdue)\b", re.IGNORECASE)

DUE_DATE_SCORE = 100
TODAY_SCORE = 50
YESTERDAY_SCORE = 30
ACTIVE_SCORE = 20
URGENCY_SCORE = 40


class Synthesizer:
    def __init__(self, scanner: Scanner, now: Optional[Callable[[], datetime]] = None) -> None:
        self.scanner = scanner
        self.now = now or scanner.now

    def get_stats(self) -> CaptureStats:
        documents = self.scanner.scan_all()
        needs_review = len(self.scanner.get_needs_review())
        if not documents:
            return CaptureStats(needs_review=needs_review)

        now = self.now()
        today_start = _start_of_day(now)
        week_ago = now - timedelta(days=7)

        by_category: Dict[str, int] = {}
        total_confidence = 0.0
        today = week = actionable = 0
        for doc in documents:
            by_category[doc.category] = by_category.get(doc.category, 0) + 1
            total_confidence += doc.confidence
            if doc.created >= today_start:
                today += 1
            if doc.created >= week_ago:
                week += 1
            if is_actionable(doc):
                actionable += 1

        return CaptureStats(
            total=len(documents),
            week=week,
            today=today,
            by_category=by_category,
            avg_confidence=total_confidence / len(documents),
            needs_review=needs_review,
            actionable=actionable,
        )

    def score(self, item: StoredDocument, now: datetime) -> int:
        today_start = _start_of_day(now)
        yesterday_start = today_start - timedelta(days=1)
        score = 0
        if item.meta("due_date"):
            score += DUE_DATE_SCORE
        if item.created >= today_start:
            score += TODAY_SCORE
        elif item.created >= yesterday_start:
            score += YESTERDAY_SCORE
        if item.meta("status") == "active":
            score += ACTIVE_SCORE
        if PRIORITY_URGENCY.search(item.content):
            score += URGENCY_SCORE
        return score

    def prioritize_actions(self, items: List[StoredDocument]) -> List[StoredDocument]:
        """Highest score first; equal scores keep scan order."""
        now = self.now()
        return sorted(items, key=lambda item: -self.score(item, now))

    def get_daily_actions(self, limit: int = DEFAULT_DAILY_LIMIT) -> List[StoredDocument]:
        actionable = self.scanner.get_actionable_items()
        if not actionable:
            return []
        return self.prioritize_actions(actionable)[:limit]

    def get_weekly_summary(self) -> WeeklySummary:
        documents = self.scanner.scan_all()
        needs_review = len(self.scanner.get_needs_review())
        week_docs = self.scanner.filter_by_date(documents, 7)
        if not week_docs:
            return WeeklySummary(needs_review_count=needs_review)

        summary = WeeklySummary(total_captures=len(week_docs), needs_review_count=needs_review)
        total_confidence = 0.0
        for doc in week_docs:
            summary.by_category[doc.category] = summary.by_category.get(doc.category, 0) + 1
            total_confidence += doc.confidence
            if doc.category == Category.PROJECTS.value and doc.status == "active":
                summary.active_projects.append(
                    ActiveProject(title=doc.title, status=doc.status, filename=doc.filename)
                )
            if doc.category == Category.PEOPLE.value and doc.meta("follow_ups"):
                summary.people_followups.append(
                    PersonFollowup(
                        title=doc.title,
                        follow_ups=str(doc.meta("follow_ups")),
                        filename=doc.filename,
                    )
                )
        summary.avg_confidence = total_confidence / len(week_docs)
        return summary


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
