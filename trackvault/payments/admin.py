from django.contrib import admin

from trackvault.payments.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_date", "supplier", "amount", "payment_type", "payment_method", "reference_number")
    list_filter = ("payment_type", "payment_method", "payment_date")
    search_fields = ("supplier__code", "supplier__name", "reference_number")
    autocomplete_fields = ("supplier",)
    readonly_fields = ("version", "created_at", "updated_at")
    ordering = ("-payment_date", "-created_at")
