from django.contrib import admin, messages
from django.utils.html import format_html
from import_export.admin import ImportExportModelAdmin

from .exceptions import BookingStateError
from .models import Booking, BookingItem, BookingPlatformFee
from .services import assign_provider, set_booking_status
from .utils import generate_invoice


class BookingItemInline(admin.TabularInline):
    model = BookingItem
    extra = 0
    fields = ('service_name', 'quantity', 'price_at_booking', 'discounted_price_at_booking',
              'tax_percent_applied', 'tax_amount')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class BookingPlatformFeeInline(admin.TabularInline):
    model = BookingPlatformFee
    extra = 0
    fields = ('name', 'fee_type', 'value_applied', 'calculated_fee_amount', 'tax_rate_on_fee', 'tax_amount_on_fee')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Booking)
class BookingAdmin(ImportExportModelAdmin):
    list_display = ('booking_id', 'customer_name', 'scheduled_date', 'scheduled_time_slot',
                    'total_amount', 'payment_method', 'status', 'provider', 'created_at')
    list_filter = ('status', 'payment_method', 'scheduled_date')
    search_fields = ('booking_id', 'customer_name', 'customer_email', 'customer_phone', 'pincode')
    date_hierarchy = 'scheduled_date'
    inlines = [BookingItemInline, BookingPlatformFeeInline]
    actions = ['mark_confirmed', 'mark_processing', 'mark_completed', 'mark_cancelled', 'build_invoices']
    readonly_fields = ('booking_id', 'sub_total', 'visiting_charge', 'tax_amount', 'total_amount',
                       'discount_code', 'discount_amount', 'cancellation_fee_paid', 'cancellation_payment_id',
                       'cancelled_at', 'invoice_link', 'created_at', 'updated_at')
    fieldsets = (
        (None, {'fields': ('booking_id', 'user', 'status', 'provider', 'notes')}),
        ('Customer', {'fields': ('customer_name', 'customer_email', 'customer_phone')}),
        ('Address', {'fields': ('address_line1', 'address_line2', 'city', 'state', 'pincode',
                                'latitude', 'longitude')}),
        ('Schedule', {'fields': ('scheduled_date', 'scheduled_time_slot')}),
        ('Amounts', {'fields': ('sub_total', 'visiting_charge', 'discount_code', 'discount_amount',
                                'tax_amount', 'total_amount')}),
        ('Payment', {'fields': ('payment_method', 'gateway_order_id', 'gateway_payment_id', 'gateway_signature')}),
        ('Cancellation', {'fields': ('cancellation_fee_paid', 'cancellation_payment_id', 'cancelled_at')}),
        ('Other', {'fields': ('is_reviewed', 'invoice_link', 'created_at', 'updated_at')}),
    )

    def invoice_link(self, obj):
        if obj.invoice:
            return format_html('<a href="{}" target="_blank">View Invoice</a>', obj.invoice.url)
        return "Not generated"
    invoice_link.short_description = "Invoice"

    def save_model(self, request, obj, form, change):
        new_provider = obj.provider
        assigning = change and 'provider' in form.changed_data and new_provider is not None
        if assigning:
            # The assignment itself goes through the lifecycle rules below
            obj.provider_id = form.initial.get('provider')
        super().save_model(request, obj, form, change)
        if assigning:
            try:
                assign_provider(obj, new_provider)
            except BookingStateError as exc:
                self.message_user(request, exc.message, level=messages.ERROR)
            else:
                self.message_user(request, f"Booking assigned to {new_provider}.")

    def _set_status(self, request, queryset, status):
        updated = 0
        for booking in queryset:
            try:
                set_booking_status(booking, status)
            except BookingStateError as exc:
                self.message_user(request, exc.message, level=messages.WARNING)
            else:
                updated += 1
        if updated:
            self.message_user(request, f"{updated} booking(s) marked as {status}.")

    def mark_confirmed(self, request, queryset):
        self._set_status(request, queryset, Booking.Status.CONFIRMED)
    mark_confirmed.short_description = "Mark selected bookings as Confirmed"

    def mark_processing(self, request, queryset):
        self._set_status(request, queryset, Booking.Status.PROCESSING)
    mark_processing.short_description = "Mark selected bookings as Processing"

    def mark_completed(self, request, queryset):
        self._set_status(request, queryset, Booking.Status.COMPLETED)
    mark_completed.short_description = "Mark selected bookings as Completed"

    def mark_cancelled(self, request, queryset):
        self._set_status(request, queryset, Booking.Status.CANCELLED)
    mark_cancelled.short_description = "Mark selected bookings as Cancelled"

    def build_invoices(self, request, queryset):
        for booking in queryset:
            generate_invoice(booking)
        self.message_user(request, f"Generated {queryset.count()} invoice(s).")
    build_invoices.short_description = "Generate PDF invoices"
