"""Stock record and classification models."""

from __future__ import annotations

from enum import StrEnum

from possync.models._base import PosBaseModel, Quantity


class StockStatus(StrEnum):
    OUT_OF_STOCK = "out_of_stock"
    REORDER_NEEDED = "reorder_needed"
    LOW_STOCK = "low_stock"
    IN_STOCK = "in_stock"


class StockRecord(PosBaseModel):
    """Stock levels for one product. Range checks belong to the caller."""

    current_stock: Quantity = 0
    minimum_stock: Quantity = 0
    reorder_point: Quantity = 0
    product_id: int | str | None = None

    @property
    def status(self) -> StockStatus:
        from possync.engine.inventory import get_stock_status

        return get_stock_status(self.current_stock, self.minimum_stock, self.reorder_point)
