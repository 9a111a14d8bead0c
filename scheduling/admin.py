from django.contrib import admin
from import_export.admin import ImportExportModelAdmin

from .models import TimeSlotCategoryLimit


@admin.register(TimeSlotCategoryLimit)
class TimeSlotCategoryLimitAdmin(ImportExportModelAdmin):
    list_display = ('category', 'max_concurrent_bookings', 'updated_at')
    list_editable = ('max_concurrent_bookings',)
    search_fields = ('category__name',)
