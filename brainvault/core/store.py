from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from brainvault.core.models import Category

CATEGORY_DIRS: Dict[Category, str] = {
    Category.PEOPLE: "People",
    Category.PROJECTS: "Projects",
    Category.IDEAS: "Ideas",
    Category.ADMIN: "Admin",
}
NEEDS_REVIEW_DIR = "_needs_review"
INBOX_LOG = "_inbox_log.md"
DOCUMENT_EXTENSION = ".md"
EXCERPT_LENGTH = 200
UNKNOWN_USER = "unknown"


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class AuditEntry:
    timestamp: datetime
    filename: str
    user_id: Optional[str] = None
    category: Optional[str] = None
    confidence: Optional[float] = None
    thought: Optional[str] = None
    old_category: Optional[str] = None
    new_category: Optional[str] = None

    def render(self) -> str:
        lines = [
            "",
            "---",
            "",
            f"**Timestamp:** {format_timestamp(self.timestamp)}",
            f"**User:** {self.user_id or UNKNOWN_USER}",
        ]
        if self.old_category is not None:
            lines.append("**Action:** Fix")
            lines.append(f"**File:** `{self.filename}`")
            lines.append(f"**Change:** {self.old_category} → {self.new_category}")
        else:
            thought = self.thought or ""
            excerpt = thought[:EXCERPT_LENGTH]
            if len(thought) > EXCERPT_LENGTH:
                excerpt += "..."
            lines.append(f"**Category:** {self.category} (confidence: {self.confidence})")
            lines.append(f"**File:** `{self.filename}`")
            lines.append(f"**Thought:** {excerpt}")
        return "\n".join(lines) + "\n"


class KnowledgeStore:
    """Directory layout of the capture store.

    One subdirectory per category, a needs-review holding area and an
    append-only audit log, all under ``root``.
    """

    def __init__(self, root: str) -> None:
        self.root = root

    def category_dir(self, category: Category) -> str:
        return os.path.join(self.root, CATEGORY_DIRS[category])

    @property
    def review_dir(self) -> str:
        return os.path.join(self.root, NEEDS_REVIEW_DIR)

    @property
    def log_path(self) -> str:
        return os.path.join(self.root, INBOX_LOG)

    def document_dirs(self) -> List[str]:
        return [self.category_dir(category) for category in Category] + [self.review_dir]

    def list_documents(self, directory: str) -> List[str]:
        if not os.path.isdir(directory):
            return []
        return sorted(
            name
            for name in os.listdir(directory)
            if name.endswith(DOCUMENT_EXTENSION) and os.path.isfile(os.path.join(directory, name))
        )

    def find_file(self, filename: str) -> Optional[str]:
        """Locate a bare document name inside the store; paths are never followed."""
        if not filename or os.path.basename(filename) != filename:
            return None
        for directory in self.document_dirs():
            if filename in self.list_documents(directory):
                return os.path.join(directory, filename)
        return None

    def read(self, path: str) -> str:
        with open(path, "r", encoding="utf-8") as handle:
            return handle.read()

    def write(self, directory: str, filename: str, text: str) -> str:
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, filename)
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(text)
        return path

    def append_audit(self, entry: AuditEntry) -> None:
        os.makedirs(self.root, exist_ok=True)
        with open(self.log_path, "a", encoding="utf-8") as handle:
            handle.write(entry.render())

    def last_file_for_user(self, user_id: str) -> Optional[str]:
        """Return the file named by the last audit entry written for ``user_id``."""
        if not os.path.exists(self.log_path):
            return None
        last = None
        for block in self.read(self.log_path).split("\n---\n"):
            user = _field(block, "User")
            file_field = _field(block, "File")
            if user == user_id and file_field:
                last = file_field.strip("`")
        return last


def _field(block: str, name: str) -> Optional[str]:
    marker = f"**{name}:** "
    for line in block.splitlines():
        if line.startswith(marker):
            return line[len(marker) :].strip()
    return None
