"""Typed records shared by the ingest and metrics layers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Transaction:
    date: str
    product: str
    quantity: float
    revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "product": self.product, "quantity": self.quantity, "revenue": self.revenue}


# Ordered as in the source file; replaced wholesale on every upload.
Dataset = Tuple[Transaction, ...]

EMPTY_DATASET: Dataset = ()


@dataclass(frozen=True)
class Summary:
    total_revenue: float
    total_quantity: float
    number_of_transactions: int
    avg_revenue: float
    avg_quantity: float
    best_product: str
    best_product_revenue: float

    def to_dict(self) -> Dict[str, Any]:
        """Snake-case fields plus the camelCase keys the chart/table layer reads."""
        out = asdict(self)
        out.update(
            {
                "totalRevenue": self.total_revenue,
                "totalQuantity": self.total_quantity,
                "numberOfTransactions": self.number_of_transactions,
                "avgRevenue": self.avg_revenue,
                "avgQuantity": self.avg_quantity,
                "bestProduct": self.best_product,
                "bestProductRevenue": self.best_product_revenue,
            }
        )
        return out
