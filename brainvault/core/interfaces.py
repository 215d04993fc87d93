from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

ERROR_PREFIX = "Error:"


def is_error(response: str) -> bool:
    return response.startswith(ERROR_PREFIX)


class ReasoningService(ABC):
    """Text-in/text-out access to an external reasoning model.

    Implementations never raise: a failed call returns text starting with
    ``ERROR_PREFIX``.
    """

    @abstractmethod
    def complete(self, prompt: str) -> str:
        raise NotImplementedError


class Notifier(ABC):
    @abstractmethod
    def deliver(self, destination_id: str, text: str) -> Any:
        raise NotImplementedError
