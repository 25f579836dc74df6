# trackvault/products/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from trackvault.common.api.exceptions import NotFoundError
from trackvault.products.models import Product


def get_product(*, product_id: UUID, for_update: bool = False) -> Product:
    qs = Product.objects.select_for_update() if for_update else Product.objects.all()
    product = qs.filter(id=product_id).first()
    if product is None:
        raise NotFoundError(f"Product with ID {product_id} not found")
    return product


def search_products(*, q: str | None = None, status: str | None = None) -> QuerySet[Product]:
    qs = Product.objects.all()

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(Q(name__icontains=qv) | Q(code__icontains=qv))
    if status:
        qs = qs.filter(status=status)

    return qs.order_by("name")
