from __future__ import annotations

from abc import ABC, abstractmethod

from macro_indicators.core.models import AnalysisBrief, NarrationResult


class NarrationProvider(ABC):
    model: str = ""
    provider: str = ""

    @abstractmethod
    async def narrate(self, brief: AnalysisBrief) -> NarrationResult:
        raise NotImplementedError

    async def close(self) -> None:
        return None
