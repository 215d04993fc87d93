from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Callable, Optional

from loguru import logger

from brainvault.core import frontmatter
from brainvault.core.models import Category, FixResult
from brainvault.core.store import AuditEntry, KnowledgeStore


class Fixer:
    """Moves a stored capture to another category and relabels it.

    The write-new/delete-old sequence is not transactional: a failure after
    the new file is written leaves both copies on disk.
    """

    def __init__(
        self,
        store: KnowledgeStore,
        now: Callable[[], datetime] = datetime.now,
        log: Optional[Any] = None,
    ) -> None:
        self.store = store
        self.now = now
        self.log = log or logger.bind(component="fixer")

    def fix_capture(
        self,
        new_category: str,
        filename: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> FixResult:
        category = Category.parse(new_category)
        if category is None:
            return _failure(
                new_category,
                filename or "",
                f'Invalid category: "{new_category}". Valid: {", ".join(Category.values())}',
            )

        if not filename:
            filename = self.store.last_file_for_user(user_id) if user_id else None
            if not filename:
                return _failure(category.value, "", "No recent captures found to fix.")

        old_path = self.store.find_file(filename)
        if old_path is None:
            return _failure(
                category.value, filename, f'File "{filename}" not found in any category directory.'
            )

        try:
            metadata, body = frontmatter.decode(self.store.read(old_path))
            old_category = str(metadata.get("category") or Category.ADMIN.value)
            metadata["category"] = category.value
            new_path = self.store.write(
                self.store.category_dir(category), filename, frontmatter.encode(metadata, body)
            )
            if os.path.abspath(new_path) != os.path.abspath(old_path):
                os.remove(old_path)
        except (OSError, UnicodeDecodeError) as exc:
            self.log.error("Failed to fix capture {}: {}", filename, exc)
            return _failure(category.value, filename, f"Error fixing capture: {exc}", old_path=old_path)

        self.store.append_audit(
            AuditEntry(
                timestamp=self.now(),
                user_id=user_id,
                filename=filename,
                old_category=old_category,
                new_category=category.value,
            )
        )
        self.log.info("Capture {} reclassified {} -> {}", filename, old_category, category.value)
        return FixResult(
            success=True,
            old_category=old_category,
            new_category=category.value,
            filename=filename,
            old_path=old_path,
            new_path=new_path,
            message=f'Moved "{filename}" from {old_category} to {category.value}.',
        )


def _failure(new_category: str, filename: str, message: str, old_path: str = "") -> FixResult:
    return FixResult(
        success=False,
        old_category="",
        new_category=new_category,
        filename=filename,
        old_path=old_path,
        new_path="",
        message=message,
    )
