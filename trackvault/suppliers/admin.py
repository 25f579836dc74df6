from django.contrib import admin

from trackvault.suppliers.models import Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "contact_person", "phone", "city", "status", "version")
    list_filter = ("status", "country")
    search_fields = ("code", "name", "contact_person", "phone")
    ordering = ("name",)
