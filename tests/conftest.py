import json
from datetime import datetime
from typing import Callable, List, Optional, Union

import pytest

from brainvault.core import frontmatter
from brainvault.core.gateway import ClassificationGateway
from brainvault.core.interfaces import Notifier, ReasoningService
from brainvault.core.prompts import TemplateLoader
from brainvault.core.scanner import Scanner
from brainvault.core.store import KnowledgeStore, format_timestamp
from brainvault.core.synthesis import Synthesizer

NOW = datetime(2026, 10, 17, 12, 0, 0)


class FakeReasoning(ReasoningService):
    """Returns canned replies and records every prompt."""

    def __init__(self, reply: Union[str, Callable[[str], str]] = "") -> None:
        self.reply = reply
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[tuple] = []

    def deliver(self, destination_id: str, text: str) -> None:
        if self.fail:
            raise RuntimeError("delivery failed")
        self.sent.append((destination_id, text))


def classification_reply(category: str, confidence: float, extracted: dict, reasoning: str = "test") -> str:
    return json.dumps(
        {
            "category": category,
            "confidence": confidence,
            "reasoning": reasoning,
            "extracted_data": extracted,
        }
    )


def write_document(
    store: KnowledgeStore,
    directory: str,
    filename: str,
    metadata: dict,
    body: str = "## Original Thought\n\nsomething",
    created: Optional[datetime] = None,
) -> str:
    metadata = dict(metadata)
    if created is not None:
        metadata["created"] = format_timestamp(created)
    return store.write(directory, filename, frontmatter.encode(metadata, body))


@pytest.fixture
def store(tmp_path):
    return KnowledgeStore(str(tmp_path / "brain"))


@pytest.fixture
def templates(tmp_path):
    # empty fallback dir so tests only ever see the built-in templates
    return TemplateLoader(fallback_dir=str(tmp_path / "no-prompts"))


@pytest.fixture
def reasoning():
    return FakeReasoning()


@pytest.fixture
def gateway(reasoning, templates):
    return ClassificationGateway(reasoning, templates)


@pytest.fixture
def scanner(store):
    return Scanner(store, now=lambda: NOW)


@pytest.fixture
def synthesizer(scanner):
    return Synthesizer(scanner)
