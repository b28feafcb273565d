"""Abstract gateway to the external inventory authority."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from order_service.domain.model.inventory import (
    AvailabilityResult,
    StockDeduction,
    StockRequest,
)


class InventoryGateway(ABC):

    @abstractmethod
    async def check_availability(
        self, requests: Sequence[StockRequest]
    ) -> AvailabilityResult:
        """Report which products cannot cover their requested quantity.

        A product whose availability cannot be proven (unreachable
        authority, bad payload) counts as unavailable.
        """

    @abstractmethod
    async def deduct_stock(self, product_id: str, quantity: int) -> StockDeduction:
        """Deduct *quantity* units, raising DeductionError on any failure."""
