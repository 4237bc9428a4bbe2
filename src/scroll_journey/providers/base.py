from __future__ import annotations

from abc import ABC, abstractmethod
from scroll_journey.core.models import JourneyInput


class JourneySource(ABC):
    """Hand over an already-parsed path and narrative point set."""

    @abstractmethod
    def load(self) -> JourneyInput:
        raise NotImplementedError
