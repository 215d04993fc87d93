from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from brainvault.core.schema import AdminData, IdeasData, PeopleData, ProjectsData


class Category(str, Enum):
    PEOPLE = "people"
    PROJECTS = "projects"
    IDEAS = "ideas"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: Any) -> Optional["Category"]:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


ExtractedData = Union[PeopleData, ProjectsData, IdeasData, AdminData]


@dataclass
class Classification:
    category: Category
    confidence: float
    reasoning: str
    extracted: ExtractedData


@dataclass
class CaptureResult:
    file_path: str
    category: Category
    confidence: float
    needs_review: bool
    filename: str


@dataclass
class StoredDocument:
    filename: str
    filepath: str
    category: str
    content: str
    metadata: Dict[str, Any]
    created: datetime
    modified: datetime
    title: str
    confidence: float
    status: Optional[str] = None

    def meta(self, key: str) -> Any:
        return self.metadata.get(key)


@dataclass
class CaptureStats:
    total: int = 0
    week: int = 0
    today: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)
    avg_confidence: float = 0.0
    needs_review: int = 0
    actionable: int = 0


@dataclass
class ActiveProject:
    title: str
    status: Optional[str]
    filename: str


@dataclass
class PersonFollowup:
    title: str
    follow_ups: str
    filename: str


@dataclass
class WeeklySummary:
    total_captures: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)
    active_projects: List[ActiveProject] = field(default_factory=list)
    people_followups: List[PersonFollowup] = field(default_factory=list)
    avg_confidence: float = 0.0
    needs_review_count: int = 0


@dataclass
class FixResult:
    success: bool
    old_category: str
    new_category: str
    filename: str
    old_path: str
    new_path: str
    message: str


@dataclass
class ScheduledJob:
    job_id: str
    label: str
    next_run: datetime
