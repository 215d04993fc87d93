from __future__ import annotations

import os
import re
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional

from loguru import logger

from brainvault.core import frontmatter
from brainvault.core.models import Category, StoredDocument
from brainvault.core.store import DOCUMENT_EXTENSION, KnowledgeStore

ACTIONABLE_STATUSES = {"active", "todo"}
URGENCY_PATTERN = re.compile(r"\b(urgent|asap|deadline|overdue|today|tomorrow)\b", re.IGNORECASE)


class Scanner:
    def __init__(
        self,
        store: KnowledgeStore,
        now: Callable[[], datetime] = datetime.now,
        log: Optional[Any] = None,
    ) -> None:
        self.store = store
        self.now = now
        self.log = log or logger.bind(component="scanner")

    def scan_all(self) -> List[StoredDocument]:
        if not os.path.isdir(self.store.root):
            self.log.debug("Data directory {} not found, returning empty scan", self.store.root)
            return []
        documents: List[StoredDocument] = []
        for category in Category:
            documents.extend(self._read_dir(self.store.category_dir(category), category))
        documents.extend(self.get_needs_review())
        return documents

    def scan_category(self, category: Category) -> List[StoredDocument]:
        return self._read_dir(self.store.category_dir(category), category)

    def get_needs_review(self) -> List[StoredDocument]:
        return self._read_dir(self.store.review_dir, Category.ADMIN)

    def filter_by_date(self, documents: List[StoredDocument], days: int) -> List[StoredDocument]:
        cutoff = self.now() - timedelta(days=days)
        return [doc for doc in documents if doc.created >= cutoff]

    def get_actionable_items(self) -> List[StoredDocument]:
        return [doc for doc in self.scan_all() if is_actionable(doc)]

    def _read_dir(self, directory: str, default_category: Category) -> List[StoredDocument]:
        documents: List[StoredDocument] = []
        for filename in self.store.list_documents(directory):
            try:
                documents.append(self._read_document(directory, filename, default_category))
            except (OSError, UnicodeDecodeError, ValueError, TypeError) as exc:
                self.log.warning("Failed to parse {}: {}", filename, exc)
        return documents

    def _read_document(self, directory: str, filename: str, default_category: Category) -> StoredDocument:
        filepath = os.path.join(directory, filename)
        metadata, content = frontmatter.decode(self.store.read(filepath))
        modified = datetime.fromtimestamp(os.stat(filepath).st_mtime)

        category = Category.parse(metadata.get("category"))
        if category is None:
            self.log.warning("{} has no valid category, using {}", filename, default_category.value)
            category = default_category

        status = metadata.get("status")
        return StoredDocument(
            filename=filename,
            filepath=filepath,
            category=category.value,
            content=content,
            metadata=metadata,
            created=_parse_created(metadata.get("created")) or modified,
            modified=modified,
            title=str(metadata.get("name") or filename[: -len(DOCUMENT_EXTENSION)]),
            confidence=float(metadata.get("confidence") or 0),
            status=str(status) if status not in (None, "") else None,
        )


def is_actionable(doc: StoredDocument) -> bool:
    if doc.category == Category.PROJECTS.value:
        return doc.meta("status") in ACTIONABLE_STATUSES
    if doc.category == Category.PEOPLE.value:
        return bool(doc.meta("follow_ups"))
    if doc.category == Category.ADMIN.value:
        if doc.meta("due_date"):
            return True
        return bool(URGENCY_PATTERN.search(doc.content))
    return False


def _parse_created(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        created = datetime.fromisoformat(value)
    except ValueError:
        return None
    if created.tzinfo is not None:
        created = created.astimezone().replace(tzinfo=None)
    return created
