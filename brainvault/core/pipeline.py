from __future__ import annotations

import os
import re
import subprocess
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from brainvault.core import frontmatter
from brainvault.core.gateway import ClassificationGateway
from brainvault.core.models import CaptureResult, Classification
from brainvault.core.store import DOCUMENT_EXTENSION, AuditEntry, KnowledgeStore, format_timestamp

FILENAME_PLACEHOLDER = "capture"
SLUG_LENGTH = 40

BODY_SECTIONS = [
    ("context", "Context"),
    ("follow_ups", "Follow Ups"),
    ("next_action", "Next Action"),
    ("one_liner", "One Liner"),
    ("notes", "Notes"),
]


class CapturePipeline:
    def __init__(
        self,
        gateway: ClassificationGateway,
        store: KnowledgeStore,
        confidence_threshold: float,
        git_commit: bool = False,
        now: Callable[[], datetime] = datetime.now,
        log: Optional[Any] = None,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.confidence_threshold = confidence_threshold
        self.git_commit = git_commit
        self.now = now
        self.log = log or logger.bind(component="capture")

    def capture(self, thought: str, user_id: Optional[str] = None) -> CaptureResult:
        classification = self.gateway.classify(thought)
        return self.store_classified(thought, classification, user_id)

    def store_classified(
        self, thought: str, classification: Classification, user_id: Optional[str] = None
    ) -> CaptureResult:
        created = self.now()
        needs_review = classification.confidence < self.confidence_threshold
        if needs_review:
            target_dir = self.store.review_dir
        else:
            target_dir = self.store.category_dir(classification.category)

        fields = classification.extracted.model_dump(exclude_none=True)
        metadata: Dict[str, Any] = {"category": classification.category.value}
        metadata.update(fields)
        metadata["confidence"] = classification.confidence
        metadata["created"] = format_timestamp(created)

        filename = build_filename(fields.get("name"), created)
        text = frontmatter.encode(metadata, build_body(thought, classification.reasoning, fields))
        file_path = self.store.write(target_dir, filename, text)
        self.log.info(
            "Capture saved to {} ({}, confidence {})",
            file_path,
            classification.category.value,
            classification.confidence,
        )

        self.store.append_audit(
            AuditEntry(
                timestamp=created,
                user_id=user_id,
                category=classification.category.value,
                confidence=classification.confidence,
                filename=filename,
                thought=thought,
            )
        )

        if self.git_commit:
            self._commit(file_path, classification.category.value)

        return CaptureResult(
            file_path=file_path,
            category=classification.category,
            confidence=classification.confidence,
            needs_review=needs_review,
            filename=filename,
        )

    def _commit(self, file_path: str, category: str) -> None:
        relative = os.path.relpath(file_path, self.store.root)
        try:
            self._ensure_repo()
            self._git("add", relative)
            self._git("commit", "-m", f"capture: {category} - {relative}")
        except (OSError, subprocess.SubprocessError) as exc:
            self.log.warning("Git commit failed (non-blocking): {}", exc)

    def _ensure_repo(self) -> None:
        # data_dir may already live inside a parent repository
        try:
            self._git("rev-parse", "--git-dir")
        except subprocess.CalledProcessError:
            self.log.info("Initialising git repository in {}", self.store.root)
            self._git("init")

    def _git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.store.root,
            capture_output=True,
            text=True,
            timeout=30,
            check=True,
        )
        return result.stdout.strip()


def build_body(thought: str, reasoning: str, fields: Dict[str, Any]) -> str:
    parts: List[str] = []
    for key, title in BODY_SECTIONS:
        value = fields.get(key)
        if value:
            parts.append(f"## {title}\n\n{value}")
    parts.append(f"## Original Thought\n\n{thought}")
    parts.append(f"## Classification Reasoning\n\n{reasoning}")
    return "\n\n".join(parts)


def build_filename(name: Optional[str], created: datetime) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", str(name or FILENAME_PLACEHOLDER).lower()).strip("-")[:SLUG_LENGTH]
    slug = slug.strip("-") or FILENAME_PLACEHOLDER
    return f"{slug}-{created:%Y%m%d}-{created:%H%M%S}{DOCUMENT_EXTENSION}"
