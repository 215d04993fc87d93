"""Tests for reclassifying stored captures."""

import os

import pytest

from brainvault.core import frontmatter
from brainvault.core.fixer import Fixer
from brainvault.core.gateway import ClassificationGateway
from brainvault.core.models import Category
from brainvault.core.pipeline import CapturePipeline
from brainvault.core.store import AuditEntry

from conftest import NOW, FakeReasoning, classification_reply, write_document


def make_fixer(store):
    return Fixer(store, now=lambda: NOW)


class TestFixCapture:
    def test_moves_and_relabels(self, store):
        old = write_document(
            store,
            store.category_dir(Category.ADMIN),
            "sarah-call.md",
            {"category": "admin", "name": "Sarah", "confidence": 0.7},
            body="## Original Thought\n\nCall Sarah",
            created=NOW,
        )
        result = make_fixer(store).fix_capture("people", filename="sarah-call.md", user_id="42")

        assert result.success is True
        assert result.old_category == "admin"
        assert result.new_category == "people"
        assert result.old_path == old
        assert result.new_path == os.path.join(store.category_dir(Category.PEOPLE), "sarah-call.md")
        assert not os.path.exists(old)

        metadata, body = frontmatter.decode(store.read(result.new_path))
        assert metadata["category"] == "people"
        assert metadata["name"] == "Sarah"
        assert metadata["confidence"] == 0.7
        assert body == "## Original Thought\n\nCall Sarah"

        log = store.read(store.log_path)
        assert "**Action:** Fix" in log
        assert "**Change:** admin → people" in log
        assert "**User:** 42" in log

    def test_out_of_needs_review(self, store):
        write_document(store, store.review_dir, "vague.md", {"category": "ideas", "confidence": 0.2})
        result = make_fixer(store).fix_capture("Projects", filename="vague.md")

        assert result.success is True
        assert result.old_category == "ideas"
        assert os.path.dirname(result.new_path) == store.category_dir(Category.PROJECTS)
        assert store.list_documents(store.review_dir) == []

    def test_same_category_rewrites_in_place(self, store):
        path = write_document(store, store.category_dir(Category.IDEAS), "idea.md", {"category": "ideas"})
        result = make_fixer(store).fix_capture("ideas", filename="idea.md")
        assert result.success is True
        assert result.new_path == path
        assert os.path.exists(path)

    def test_invalid_category(self, store):
        write_document(store, store.category_dir(Category.ADMIN), "x.md", {"category": "admin"})
        result = make_fixer(store).fix_capture("finance", filename="x.md")

        assert result.success is False
        assert "people, projects, ideas, admin" in result.message
        assert os.path.exists(os.path.join(store.category_dir(Category.ADMIN), "x.md"))
        assert not os.path.exists(store.log_path)

    def test_missing_file(self, store):
        result = make_fixer(store).fix_capture("people", filename="ghost.md")
        assert result.success is False
        assert "ghost.md" in result.message
        assert "not found" in result.message

    @pytest.mark.parametrize("name", ["../_inbox_log.md", "../../outside.md", "People/x.md"])
    def test_paths_outside_document_dirs_are_not_found(self, store, tmp_path, name):
        write_document(store, store.category_dir(Category.PEOPLE), "x.md", {"category": "people"})
        store.append_audit(AuditEntry(timestamp=NOW, filename="x.md", thought="t", category="people", confidence=0.9))
        (tmp_path / "outside.md").write_text("---\ncategory: admin\n---\n\nkeep me")
        log_before = store.read(store.log_path)

        result = make_fixer(store).fix_capture("ideas", filename=name)

        assert result.success is False
        assert "not found" in result.message
        assert store.read(store.log_path) == log_before
        assert (tmp_path / "outside.md").read_text() == "---\ncategory: admin\n---\n\nkeep me"
        assert os.path.exists(os.path.join(store.category_dir(Category.PEOPLE), "x.md"))

    def test_absolute_path_is_not_found(self, store):
        path = write_document(store, store.category_dir(Category.ADMIN), "abs.md", {"category": "admin"})
        result = make_fixer(store).fix_capture("people", filename=path)
        assert result.success is False
        assert os.path.exists(path)

    def test_no_recent_capture(self, store):
        result = make_fixer(store).fix_capture("people", user_id="nobody")
        assert result.success is False
        assert result.message == "No recent captures found to fix."

    def test_no_filename_and_no_user(self, store):
        assert make_fixer(store).fix_capture("people").success is False

    def test_uses_last_capture_for_user(self, store, templates):
        names = iter(["Dentist", "Dentist callback", "Unrelated"])
        reasoning = FakeReasoning(lambda prompt: classification_reply("admin", 0.9, {"name": next(names)}))
        pipeline = CapturePipeline(ClassificationGateway(reasoning, templates), store, 0.6, now=lambda: NOW)
        pipeline.capture("dentist on friday", "7")
        latest = pipeline.capture("call the dentist back", "7")
        other = pipeline.capture("unrelated", "8")

        result = make_fixer(store).fix_capture("people", user_id="7")

        assert result.success is True
        assert result.filename == latest.filename
        assert os.path.exists(other.file_path)
