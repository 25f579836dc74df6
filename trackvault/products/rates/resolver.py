# trackvault/products/rates/resolver.py
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

from trackvault.common.api.exceptions import ConflictError, NotFoundError
from trackvault.common.clock import Clock, SystemClock
from trackvault.products.rates.entities import ProductRateEntity, SupersedeResult
from trackvault.products.rates.repositories import (
    DjangoProductRateRepository,
    DjangoProductRepository,
    ProductRateRepository,
    ProductRepository,
)

logger = logging.getLogger(__name__)

RATE_QUANT = Decimal("0.0001")
# numeric(15, 4) column: at most 11 digits before the point
RATE_MAX = Decimal(10) ** 11


def _to_date(value: Any, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_date(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise ValidationError({field: ["Must be a date (YYYY-MM-DD)."]})


def _clean_rate(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError({"rate": ["Must be a number."]})
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError({"rate": ["Must be a number."]})
    if not rate.is_finite():
        raise ValidationError({"rate": ["Must be a finite number."]})
    if rate < 0:
        raise ValidationError({"rate": ["Must be non-negative."]})
    if rate >= RATE_MAX or rate.quantize(RATE_QUANT) >= RATE_MAX:
        raise ValidationError({"rate": ["Must be less than 100000000000."]})
    return rate.quantize(RATE_QUANT)


def _clean_unit(unit: Any) -> str:
    unit = (unit or "").strip() if isinstance(unit, str) else ""
    if not unit:
        raise ValidationError({"unit": ["This field may not be blank."]})
    return unit


def _conflict(message: str, conflicting: list[ProductRateEntity]) -> ConflictError:
    return ConflictError(
        {
            "detail": message,
            "conflicting_rate_ids": [str(r.id) for r in conflicting],
        }
    )


class RateResolver:
    """
    Resolves the single effective rate for (product, unit, date) and guards the
    non-overlap invariant on writes.

    Active intervals of one (product, unit) must never share a day. Inactive
    rates are stored but never resolve.
    """

    def __init__(self, *, rates: ProductRateRepository, products: ProductRepository, clock: Clock) -> None:
        self.rates = rates
        self.products = products
        self.clock = clock

    # -------------------------
    # Reads
    # -------------------------

    def _require_product(self, product_id: UUID) -> None:
        if not self.products.exists(product_id):
            raise NotFoundError(f"Product {product_id} not found.")

    def find_current_rate(self, product_id: UUID, unit: str, on: date | None = None) -> Optional[ProductRateEntity]:
        """
        Current rate or None. Raises only for an unknown product or bad input.
        """
        self._require_product(product_id)
        unit = _clean_unit(unit)
        on = self.clock.today() if on is None else _to_date(on, "date")

        matches = [r for r in self.rates.find_effective(product_id, unit, on) if r.is_effective_on(on)]
        if not matches:
            return None

        if len(matches) > 1:
            matches.sort(key=lambda r: r.effective_from, reverse=True)
            logger.warning(
                "Multiple active rates for product=%s unit=%s on %s: %s; using %s",
                product_id,
                unit,
                on.isoformat(),
                ", ".join(str(r.id) for r in matches),
                matches[0].id,
            )
        return matches[0]

    def resolve_current_rate(self, product_id: UUID, unit: str, on: date | None = None) -> ProductRateEntity:
        on = self.clock.today() if on is None else _to_date(on, "date")
        found = self.find_current_rate(product_id, unit, on)
        if found is None:
            raise NotFoundError(
                f"No active rate found for product {product_id} with unit {unit} on {on.isoformat()}."
            )
        return found

    def get_rate(self, rate_id: UUID) -> ProductRateEntity:
        return self._require_rate(rate_id)

    def list_rates_for_product(self, product_id: UUID, active_only: bool = False) -> list[ProductRateEntity]:
        return list(self.rates.find_by_product(product_id, active_only=active_only))

    # -------------------------
    # Writes
    # -------------------------

    def add_rate(
        self,
        product_id: UUID,
        rate: Any,
        unit: str,
        effective_from: Any,
        effective_to: Any = None,
        is_active: bool = True,
        notes: str = "",
    ) -> ProductRateEntity:
        self._require_product(product_id)
        entity = ProductRateEntity(
            product_id=product_id,
            rate=_clean_rate(rate),
            unit=_clean_unit(unit),
            effective_from=_to_date(effective_from, "effective_from"),
            effective_to=None if effective_to is None else _to_date(effective_to, "effective_to"),
            is_active=bool(is_active),
            notes=notes or "",
        )
        if entity.effective_to is not None and entity.effective_to < entity.effective_from:
            raise ValidationError({"effective_to": ["Must not be before effective_from."]})

        with self.rates.atomic():
            self.products.lock(product_id)
            if entity.is_active:
                self._check_overlap(entity)
            saved = self.rates.save(entity)

        logger.info(
            "Added rate %s for product=%s: %s/%s from %s to %s (active=%s)",
            saved.id,
            product_id,
            saved.rate,
            saved.unit,
            saved.effective_from.isoformat(),
            saved.effective_to.isoformat() if saved.effective_to else "open",
            saved.is_active,
        )
        return saved

    def supersede_rate(
        self,
        product_id: UUID,
        rate: Any,
        unit: str,
        effective_from: Any,
        notes: str = "",
    ) -> SupersedeResult:
        """
        Close the open-ended active rate of (product, unit) the day before
        `effective_from` and open a new open-ended rate from that day.
        """
        self._require_product(product_id)
        new = ProductRateEntity(
            product_id=product_id,
            rate=_clean_rate(rate),
            unit=_clean_unit(unit),
            effective_from=_to_date(effective_from, "effective_from"),
            notes=notes or "",
        )

        with self.rates.atomic():
            self.products.lock(product_id)
            overlapping = self.rates.find_overlapping(product_id, new.unit, new.effective_from, None)

            blocking = [r for r in overlapping if r.effective_to is not None or r.effective_from >= new.effective_from]
            if blocking:
                raise _conflict(
                    "Existing rates cannot be closed before the new effective date.",
                    blocking,
                )

            closed = tuple(
                self.rates.save(r.changed(effective_to=new.effective_from - timedelta(days=1)))
                for r in overlapping
            )
            saved = self.rates.save(new)

        logger.info(
            "Superseded %d rate(s) for product=%s unit=%s with %s from %s",
            len(closed),
            product_id,
            saved.unit,
            saved.id,
            saved.effective_from.isoformat(),
        )
        return SupersedeResult(rate=saved, closed=closed)

    def deactivate_rate(self, rate_id: UUID) -> ProductRateEntity:
        with self.rates.atomic():
            current = self._require_rate(rate_id)
            if not current.is_active:
                return current
            saved = self.rates.save(current.changed(is_active=False))
        logger.info("Deactivated rate %s", rate_id)
        return saved

    def activate_rate(self, rate_id: UUID) -> ProductRateEntity:
        with self.rates.atomic():
            current = self._require_rate(rate_id)
            if current.is_active:
                return current
            self.products.lock(current.product_id)
            self._check_overlap(current)
            saved = self.rates.save(current.changed(is_active=True))
        logger.info("Activated rate %s", rate_id)
        return saved

    # -------------------------
    # Internals
    # -------------------------

    def _require_rate(self, rate_id: UUID) -> ProductRateEntity:
        found = self.rates.get(rate_id)
        if found is None:
            raise NotFoundError(f"Product rate {rate_id} not found.")
        return found

    def _check_overlap(self, entity: ProductRateEntity) -> None:
        conflicting = self.rates.find_overlapping(
            entity.product_id,
            entity.unit,
            entity.effective_from,
            entity.effective_to,
            exclude_id=entity.id,
        )
        if conflicting:
            raise _conflict(
                f"Rate interval overlaps {len(conflicting)} active rate(s) for unit {entity.unit}.",
                conflicting,
            )


def default_resolver(*, clock: Clock | None = None) -> RateResolver:
    """Resolver wired to the Django ORM and the system clock."""
    return RateResolver(
        rates=DjangoProductRateRepository(),
        products=DjangoProductRepository(),
        clock=clock or SystemClock(),
    )
