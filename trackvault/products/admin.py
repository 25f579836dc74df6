# trackvault/products/admin.py
from __future__ import annotations

from django.contrib import admin, messages

from trackvault.common.api.exceptions import ConflictError
from trackvault.products.models import Product, ProductRate
from trackvault.products.services import ProductRateService


class ProductRateInline(admin.TabularInline):
    model = ProductRate
    extra = 0
    can_delete = False
    fields = ("unit", "rate", "effective_from", "effective_to", "is_active", "version")
    readonly_fields = fields
    ordering = ("-effective_from",)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "base_unit", "status", "version", "created_at")
    list_filter = ("status", "base_unit")
    search_fields = ("code", "name")
    ordering = ("name",)
    inlines = [ProductRateInline]


@admin.register(ProductRate)
class ProductRateAdmin(admin.ModelAdmin):
    """
    Read-only view of rates; state changes go through the resolver so the
    overlap check and audit trail apply.
    """
    list_display = ("product", "unit", "rate", "effective_from", "effective_to", "is_active", "version")
    list_filter = ("is_active", "unit", "effective_from")
    search_fields = ("product__code", "product__name", "notes")
    autocomplete_fields = ("product",)
    ordering = ("-effective_from",)
    actions = ["deactivate_rates", "activate_rates"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    @admin.action(description="Deactivate selected rates")
    def deactivate_rates(self, request, queryset):
        service = ProductRateService()
        for rate in queryset:
            service.deactivate_rate(actor_user_id=request.user.id, rate_id=rate.id)
        self.message_user(request, f"Deactivated {queryset.count()} rate(s).", messages.SUCCESS)

    @admin.action(description="Activate selected rates")
    def activate_rates(self, request, queryset):
        service = ProductRateService()
        activated = 0
        for rate in queryset:
            try:
                service.activate_rate(actor_user_id=request.user.id, rate_id=rate.id)
            except ConflictError as exc:
                self.message_user(request, f"{rate}: {exc}", messages.ERROR)
                continue
            activated += 1
        self.message_user(request, f"Activated {activated} rate(s).", messages.SUCCESS)
