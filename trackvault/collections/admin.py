from django.contrib import admin

from trackvault.collections.models import Collection


@admin.register(Collection)
class CollectionAdmin(admin.ModelAdmin):
    list_display = (
        "collection_date",
        "supplier",
        "product",
        "quantity",
        "unit",
        "rate",
        "total_amount",
        "collected_by",
    )
    list_filter = ("collection_date", "unit")
    search_fields = ("supplier__code", "supplier__name", "product__code", "product__name", "notes")
    autocomplete_fields = ("supplier", "product", "product_rate")
    readonly_fields = ("total_amount", "version", "created_at", "updated_at")
    ordering = ("-collection_date", "-created_at")
