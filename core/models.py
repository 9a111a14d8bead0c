from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models


time_of_day_validator = RegexValidator(
    regex=r'^([01]\d|2[0-3]):[0-5]\d$',
    message="Use 24-hour HH:MM format.",
)

DEFAULT_POLICY_DESCRIPTION = (
    "A visiting charge of ₹{VISITING_CHARGE} will be applied if your booking "
    "total is below ₹{MINIMUM_BOOKING_AMOUNT}."
)


# -----------------------------
# Application Settings
# -----------------------------
class AppSettings(models.Model):
    """
    Marketplace-wide business configuration. A single row (pk=1) is kept and
    edited from the admin; read it through core.config.get_app_settings().
    """

    class FeeType(models.TextChoices):
        FIXED = 'fixed', 'Fixed amount'
        PERCENTAGE = 'percentage', 'Percentage'

    # --- Minimum booking policy ---
    enable_minimum_booking_policy = models.BooleanField(default=False)
    minimum_booking_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('500.00'))
    visiting_charge_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('100.00'),
        help_text="Displayed visiting charge.")
    is_visiting_charge_tax_inclusive = models.BooleanField(default=False)
    minimum_booking_policy_description = models.TextField(blank=True, default=DEFAULT_POLICY_DESCRIPTION)
    enable_tax_on_visiting_charge = models.BooleanField(default=True)
    visiting_charge_tax_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('5.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))])

    # --- Payment ---
    enable_online_payment = models.BooleanField(default=True)
    enable_cod = models.BooleanField(default=True, help_text="Allow 'Pay After Service'.")

    # --- Time slots ---
    morning_start_time = models.CharField(max_length=5, default='09:00', validators=[time_of_day_validator])
    morning_end_time = models.CharField(max_length=5, default='12:00', validators=[time_of_day_validator])
    afternoon_start_time = models.CharField(max_length=5, default='13:00', validators=[time_of_day_validator])
    afternoon_end_time = models.CharField(max_length=5, default='17:00', validators=[time_of_day_validator])
    evening_start_time = models.CharField(max_length=5, default='17:00', validators=[time_of_day_validator])
    evening_end_time = models.CharField(max_length=5, default='19:00', validators=[time_of_day_validator])
    slot_interval_minutes = models.PositiveIntegerField(default=60, validators=[MinValueValidator(1)])
    enable_limit_late_bookings = models.BooleanField(default=False)
    limit_late_booking_hours = models.PositiveIntegerField(default=4)

    # --- Cancellation policy ---
    enable_cancellation_policy = models.BooleanField(default=False)
    free_cancellation_days = models.PositiveIntegerField(default=1)
    free_cancellation_hours = models.PositiveIntegerField(default=0)
    free_cancellation_minutes = models.PositiveIntegerField(default=0)
    cancellation_fee_type = models.CharField(max_length=10, choices=FeeType.choices, default=FeeType.FIXED)
    cancellation_fee_value = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('100.00'))

    is_provider_registration_enabled = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Application settings"
        verbose_name_plural = "Application settings"

    def __str__(self):
        return "Application settings"

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    def service_periods(self):
        return [
            ('morning', self.morning_start_time, self.morning_end_time),
            ('afternoon', self.afternoon_start_time, self.afternoon_end_time),
            ('evening', self.evening_start_time, self.evening_end_time),
        ]

    def effective_late_booking_hours(self):
        if self.enable_limit_late_bookings and self.limit_late_booking_hours > 0:
            return self.limit_late_booking_hours
        return 0

    def active_platform_fees(self):
        return list(self.platform_fees.filter(is_active=True).order_by('id'))


class PlatformFee(models.Model):
    """An extra charge added to every booking, taxed on its own."""

    class FeeType(models.TextChoices):
        PERCENTAGE = 'percentage', 'Percentage of item subtotal'
        FIXED = 'fixed', 'Fixed amount'

    settings = models.ForeignKey(AppSettings, on_delete=models.CASCADE, related_name='platform_fees', default=1)
    name = models.CharField(max_length=100)
    fee_type = models.CharField(max_length=10, choices=FeeType.choices, default=FeeType.FIXED)
    value = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    fee_tax_rate_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
        help_text="Tax applied to this fee. 0 if untaxed.")
    is_active = models.BooleanField(default=True)

    def __str__(self):
        suffix = '%' if self.fee_type == self.FeeType.PERCENTAGE else ''
        return f"{self.name} ({self.value}{suffix})"


# -----------------------------
# Notifications
# -----------------------------
class Notification(models.Model):
    class NotificationType(models.TextChoices):
        INFO = 'info', 'Info'
        SUCCESS = 'success', 'Success'
        WARNING = 'warning', 'Warning'
        ERROR = 'error', 'Error'
        BOOKING_UPDATE = 'booking_update', 'Booking update'
        ADMIN_ALERT = 'admin_alert', 'Admin alert'

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=255)
    message = models.TextField()
    notification_type = models.CharField(max_length=20, choices=NotificationType.choices, default=NotificationType.INFO)
    href = models.CharField(max_length=255, blank=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'read'])]

    def __str__(self):
        return f"{self.title} → {self.user}"


# -----------------------------
# User Activity
# -----------------------------
class UserActivity(models.Model):
    class EventType(models.TextChoices):
        PAGE_VIEW = 'pageView', 'Page view'
        ADD_TO_CART = 'addToCart', 'Add to cart'
        REMOVE_FROM_CART = 'removeFromCart', 'Remove from cart'
        CHECKOUT_STEP = 'checkoutStep', 'Checkout step'
        NEW_BOOKING = 'newBooking', 'New booking'
        BOOKING_CANCELLED = 'bookingCancelled', 'Booking cancelled'
        USER_LOGIN = 'userLogin', 'User login'

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
                             null=True, blank=True, related_name='activities')
    guest_id = models.CharField(max_length=64, blank=True)
    event_type = models.CharField(max_length=30, choices=EventType.choices)
    event_data = models.JSONField(default=dict, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-timestamp']
        verbose_name_plural = "User activities"

    def __str__(self):
        who = self.user or f"guest {self.guest_id}"
        return f"{self.get_event_type_display()} by {who}"
