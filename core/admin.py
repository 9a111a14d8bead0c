from django.contrib import admin
from import_export.admin import ImportExportModelAdmin

from .models import AppSettings, Notification, PlatformFee, UserActivity


class PlatformFeeInline(admin.TabularInline):
    model = PlatformFee
    extra = 0
    fields = ('name', 'fee_type', 'value', 'fee_tax_rate_percent', 'is_active')


@admin.register(AppSettings)
class AppSettingsAdmin(admin.ModelAdmin):
    inlines = [PlatformFeeInline]
    fieldsets = (
        ('Minimum booking policy', {'fields': (
            'enable_minimum_booking_policy', 'minimum_booking_amount', 'visiting_charge_amount',
            'is_visiting_charge_tax_inclusive', 'enable_tax_on_visiting_charge',
            'visiting_charge_tax_percent', 'minimum_booking_policy_description')}),
        ('Payment', {'fields': ('enable_online_payment', 'enable_cod')}),
        ('Time slots', {'fields': (
            ('morning_start_time', 'morning_end_time'),
            ('afternoon_start_time', 'afternoon_end_time'),
            ('evening_start_time', 'evening_end_time'),
            'slot_interval_minutes', 'enable_limit_late_bookings', 'limit_late_booking_hours')}),
        ('Cancellation', {'fields': (
            'enable_cancellation_policy',
            ('free_cancellation_days', 'free_cancellation_hours', 'free_cancellation_minutes'),
            'cancellation_fee_type', 'cancellation_fee_value')}),
        ('Providers', {'fields': ('is_provider_registration_enabled',)}),
    )

    def has_add_permission(self, request):
        return not AppSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Notification)
class NotificationAdmin(ImportExportModelAdmin):
    list_display = ('title', 'user', 'notification_type', 'read', 'created_at')
    list_filter = ('notification_type', 'read')
    search_fields = ('title', 'message', 'user__email')


@admin.register(UserActivity)
class UserActivityAdmin(ImportExportModelAdmin):
    list_display = ('event_type', 'user', 'guest_id', 'timestamp')
    list_filter = ('event_type',)
    search_fields = ('user__email', 'guest_id')
    readonly_fields = ('user', 'guest_id', 'event_type', 'event_data', 'user_agent', 'timestamp')
