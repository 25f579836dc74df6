# trackvault/products/rates/entities.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class ProductRateEntity:
    """
    Read model of a ProductRate row, independent of the ORM.

    The effective interval is [effective_from, effective_to], inclusive on both
    ends; effective_to=None means open-ended.
    """
    product_id: UUID
    rate: Decimal
    unit: str
    effective_from: date
    effective_to: date | None = None
    is_active: bool = True
    notes: str = ""
    version: int = 1
    id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def contains(self, on: date) -> bool:
        return self.effective_from <= on and (self.effective_to is None or on <= self.effective_to)

    def is_effective_on(self, on: date) -> bool:
        return self.is_active and self.contains(on)

    def overlaps(self, effective_from: date, effective_to: date | None) -> bool:
        """True if this interval shares at least one day with [effective_from, effective_to]."""
        starts_before_other_ends = effective_to is None or self.effective_from <= effective_to
        ends_after_other_starts = self.effective_to is None or self.effective_to >= effective_from
        return starts_before_other_ends and ends_after_other_starts

    def changed(self, **changes) -> "ProductRateEntity":
        """Copy with `changes` applied and the version bumped."""
        return replace(self, version=self.version + 1, **changes)


@dataclass(frozen=True)
class SupersedeResult:
    rate: ProductRateEntity
    closed: tuple[ProductRateEntity, ...] = ()
