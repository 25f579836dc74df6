# trackvault/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from trackvault.audit.api.views import AuditEventViewSet
from trackvault.collections.api.views import CollectionViewSet
from trackvault.iam.api.auth import LoginView, LogoutView, RefreshView
from trackvault.iam.api.me import MeView
from trackvault.payments.api.views import PaymentViewSet
from trackvault.products.api.views import ProductRateViewSet, ProductViewSet
from trackvault.suppliers.api.views import SupplierViewSet

router = DefaultRouter()

router.register(r"suppliers", SupplierViewSet, basename="suppliers")
router.register(r"products", ProductViewSet, basename="products")
router.register(r"product-rates", ProductRateViewSet, basename="product-rates")
router.register(r"collections", CollectionViewSet, basename="collections")
router.register(r"payments", PaymentViewSet, basename="payments")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
