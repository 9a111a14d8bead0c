from django.contrib import admin
from import_export.admin import ImportExportModelAdmin

from .models import PromoCode


@admin.register(PromoCode)
class PromoCodeAdmin(ImportExportModelAdmin):
    list_display = ('code', 'discount_type', 'discount_value', 'uses_count', 'max_uses',
                    'valid_from', 'valid_until', 'is_active')
    list_filter = ('discount_type', 'is_active')
    search_fields = ('code', 'description')
    readonly_fields = ('uses_count', 'created_at')
