"""
Food-search collaborator contract.

The validation engine only depends on ``FoodSearch.search``; any exception it
raises is treated as a soft failure by the claims evaluator.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic import BaseModel, Field
from compliance.models import CamelModel, FoodSummary


class FoodSearchError(Exception):
    """Raised when the food database cannot be searched (network, timeout, bad payload)."""

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class LookupCancelled(FoodSearchError):
    """Raised when the caller cancels a reference-food lookup."""

    def __init__(self, message: str = "Reference food lookup was cancelled by the caller."):
        super().__init__("CANCELLED", message)


class FoodSearchMeta(CamelModel):
    total_hits: int = 0
    limit: int


class FoodSearchResult(BaseModel):
    items: List[FoodSummary] = Field(default_factory=list)
    meta: FoodSearchMeta


class FoodSearch(ABC):
    """Searches an external food database for reference foods."""

    @abstractmethod
    async def search(
        self,
        query: str,
        limit: int,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> FoodSearchResult:
        """
        Return up to ``limit`` foods matching ``query``.

        Implementations should check ``cancel_event`` before doing I/O and
        raise ``LookupCancelled`` when it is set.
        """
        pass


class StaticFoodSearch(FoodSearch):
    """In-memory FoodSearch returning a fixed list; used for fixtures and offline runs."""

    def __init__(self, foods: Optional[List[FoodSummary]] = None):
        self.foods = list(foods or [])

    async def search(self, query, limit, cancel_event=None):
        if cancel_event is not None and cancel_event.is_set():
            raise LookupCancelled()
        items = self.foods[:limit]
        return FoodSearchResult(items=items, meta=FoodSearchMeta(total_hits=len(self.foods), limit=limit))
