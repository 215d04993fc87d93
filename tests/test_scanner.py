"""Tests for reading the store back."""

import os
from datetime import timedelta

from brainvault.core.models import Category
from brainvault.core.scanner import Scanner, is_actionable
from brainvault.core.store import KnowledgeStore

from conftest import NOW, write_document


def test_missing_root_scans_empty(tmp_path):
    assert Scanner(KnowledgeStore(str(tmp_path / "nowhere"))).scan_all() == []


def test_scan_all_reads_every_directory(store, scanner):
    write_document(store, store.category_dir(Category.PEOPLE), "a.md", {"category": "people", "name": "A"}, created=NOW)
    write_document(store, store.category_dir(Category.IDEAS), "b.md", {"category": "ideas"}, created=NOW)
    write_document(store, store.review_dir, "c.md", {"category": "admin", "confidence": 0.2}, created=NOW)
    store.write(store.category_dir(Category.PEOPLE), "notes.txt", "ignored")

    docs = scanner.scan_all()
    assert sorted(doc.filename for doc in docs) == ["a.md", "b.md", "c.md"]
    assert [doc.filename for doc in scanner.scan_category(Category.IDEAS)] == ["b.md"]
    assert [doc.filename for doc in scanner.get_needs_review()] == ["c.md"]


def test_document_mapping_defaults(store, scanner):
    path = write_document(store, store.category_dir(Category.PROJECTS), "no-meta.md", {"status": "active"})
    doc = scanner.scan_category(Category.PROJECTS)[0]

    assert doc.title == "no-meta"
    assert doc.category == "projects"
    assert doc.status == "active"
    assert doc.confidence == 0.0
    assert doc.created == doc.modified
    assert doc.filepath == path


def test_created_from_metadata(store, scanner):
    created = NOW - timedelta(days=3)
    write_document(store, store.category_dir(Category.ADMIN), "x.md", {"name": "Tax"}, created=created)
    doc = scanner.scan_category(Category.ADMIN)[0]
    assert doc.created == created
    assert doc.title == "Tax"


def test_bad_file_is_skipped(store, scanner):
    write_document(store, store.category_dir(Category.ADMIN), "good.md", {"name": "ok"})
    write_document(store, store.category_dir(Category.ADMIN), "bad.md", {"confidence": "high"})
    bad_bytes = os.path.join(store.category_dir(Category.ADMIN), "binary.md")
    with open(bad_bytes, "wb") as handle:
        handle.write(b"\xff\xfe\x00garbage")

    assert [doc.filename for doc in scanner.scan_all()] == ["good.md"]


def test_filter_by_date(store, scanner):
    directory = store.category_dir(Category.IDEAS)
    write_document(store, directory, "new.md", {}, created=NOW - timedelta(days=6, hours=23))
    write_document(store, directory, "old.md", {}, created=NOW - timedelta(days=7, hours=1))
    docs = scanner.filter_by_date(scanner.scan_all(), 7)
    assert [doc.filename for doc in docs] == ["new.md"]


def test_actionable_rules(store, scanner):
    people = store.category_dir(Category.PEOPLE)
    projects = store.category_dir(Category.PROJECTS)
    admin = store.category_dir(Category.ADMIN)
    ideas = store.category_dir(Category.IDEAS)
    write_document(store, projects, "active.md", {"category": "projects", "status": "active"})
    write_document(store, projects, "todo.md", {"category": "projects", "status": "todo"})
    write_document(store, projects, "someday.md", {"category": "projects", "status": "someday"})
    write_document(store, people, "follow.md", {"category": "people", "follow_ups": "call back"})
    write_document(store, people, "quiet.md", {"category": "people", "follow_ups": ""})
    write_document(store, admin, "due.md", {"category": "admin", "due_date": "2026-10-20"})
    write_document(store, admin, "urgent.md", {"category": "admin"}, body="Renew passport ASAP")
    write_document(store, admin, "plain.md", {"category": "admin"}, body="File receipts eventually")
    write_document(store, ideas, "idea.md", {"category": "ideas", "due_date": "2026-10-20"}, body="urgent")

    names = sorted(doc.filename for doc in scanner.get_actionable_items())
    assert names == ["active.md", "due.md", "follow.md", "todo.md", "urgent.md"]


def test_invalid_category_uses_directory(store, scanner):
    write_document(store, store.category_dir(Category.PEOPLE), "odd.md", {"category": "friends"})
    doc = scanner.scan_all()[0]
    assert doc.category == "people"
    assert is_actionable(doc) is False
