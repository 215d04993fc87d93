from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from brainvault.config import AppConfig
from brainvault.core.digest import DigestGenerator
from brainvault.core.fixer import Fixer
from brainvault.core.gateway import ClassificationGateway
from brainvault.core.interfaces import Notifier, ReasoningService
from brainvault.core.models import CaptureResult, CaptureStats, FixResult, StoredDocument
from brainvault.core.pipeline import CapturePipeline
from brainvault.core.prompts import TemplateLoader
from brainvault.core.scanner import Scanner
from brainvault.core.scheduler import Scheduler
from brainvault.core.store import KnowledgeStore
from brainvault.core.synthesis import Synthesizer
from brainvault.registry import build_adapter


@dataclass
class SecondBrain:
    """The command surface offered to chat front ends."""

    store: KnowledgeStore
    pipeline: CapturePipeline
    scanner: Scanner
    synthesizer: Synthesizer
    digest: DigestGenerator
    fixer: Fixer
    scheduler: Scheduler

    def capture(self, text: str, user_id: Optional[str] = None) -> CaptureResult:
        return self.pipeline.capture(text, user_id)

    def get_stats(self) -> CaptureStats:
        return self.synthesizer.get_stats()

    def get_needs_review(self) -> List[StoredDocument]:
        return self.scanner.get_needs_review()

    def generate_daily_digest(self) -> str:
        return self.digest.generate_daily_digest()

    def generate_weekly_review(self) -> str:
        return self.digest.generate_weekly_review()

    def fix_capture(
        self, category: str, filename: Optional[str] = None, user_id: Optional[str] = None
    ) -> FixResult:
        return self.fixer.fix_capture(category, filename, user_id)


def build_brain(
    config: AppConfig,
    reasoning: Optional[ReasoningService] = None,
    notifier: Optional[Notifier] = None,
) -> SecondBrain:
    reasoning = reasoning or build_adapter(config.reasoning, ReasoningService)
    notifier = notifier or build_adapter(config.notifier, Notifier)

    store = KnowledgeStore(config.data_dir)
    templates = TemplateLoader(config.templates_dir)
    gateway = ClassificationGateway(reasoning, templates)
    scanner = Scanner(store)
    synthesizer = Synthesizer(scanner)
    digest = DigestGenerator(gateway, synthesizer, templates, daily_limit=config.daily.limit)
    scheduler = Scheduler(
        digest,
        notifier,
        destination_id=config.chat_id,
        daily_time=config.daily.time if config.daily.enabled else None,
        weekly_day=config.weekly.day if config.weekly.enabled else None,
        weekly_time=config.weekly.time if config.weekly.enabled else None,
        daily_timezone=config.daily.timezone,
        weekly_timezone=config.weekly.timezone,
    )
    return SecondBrain(
        store=store,
        pipeline=CapturePipeline(
            gateway, store, config.confidence_threshold, git_commit=config.git_commit
        ),
        scanner=scanner,
        synthesizer=synthesizer,
        digest=digest,
        fixer=Fixer(store),
        scheduler=scheduler,
    )
