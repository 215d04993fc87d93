"""Validation models for the classifier's JSON reply.

``extracted_data`` is a tagged union keyed by ``category``: each category has
its own model, and only the fields of that model survive validation.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, Field


class PeopleData(BaseModel):
    name: str
    context: str
    follow_ups: Optional[str] = None
    tags: Optional[List[str]] = None


class ProjectsData(BaseModel):
    name: str
    status: Literal["active", "waiting", "blocked", "someday", "todo"]
    next_action: str
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class IdeasData(BaseModel):
    name: str
    one_liner: str
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class AdminData(BaseModel):
    name: str
    due_date: Optional[str] = None
    notes: Optional[str] = None


EXTRACTED_MODELS: Dict[str, Type[BaseModel]] = {
    "people": PeopleData,
    "projects": ProjectsData,
    "ideas": IdeasData,
    "admin": AdminData,
}


class ClassificationPayload(BaseModel):
    category: Literal["people", "projects", "ideas", "admin"]
    confidence: float = Field(ge=0.0, le=1.0, strict=True)
    reasoning: str
    extracted_data: Dict[str, Any]

    def extracted(self) -> BaseModel:
        """Validate ``extracted_data`` against the model for ``category``."""
        return EXTRACTED_MODELS[self.category].model_validate(self.extracted_data)
