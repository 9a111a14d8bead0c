from decimal import Decimal

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models

slot_label_validator = RegexValidator(
    r'^(0[1-9]|1[0-2]):[0-5]\d (AM|PM)$', "Time slot must look like '10:00 AM'.")


# -----------------------------
# Booking
# -----------------------------
class Booking(models.Model):
    class Status(models.TextChoices):
        PENDING_PAYMENT = 'Pending Payment', 'Pending Payment'
        CONFIRMED = 'Confirmed', 'Confirmed'
        PROCESSING = 'Processing', 'Processing'
        COMPLETED = 'Completed', 'Completed'
        CANCELLED = 'Cancelled', 'Cancelled'
        RESCHEDULED = 'Rescheduled', 'Rescheduled'
        ASSIGNED_TO_PROVIDER = 'AssignedToProvider', 'Assigned to provider'
        PROVIDER_ACCEPTED = 'ProviderAccepted', 'Provider accepted'
        PROVIDER_REJECTED = 'ProviderRejected', 'Provider rejected'
        IN_PROGRESS_BY_PROVIDER = 'InProgressByProvider', 'In progress'

    class PaymentMethod(models.TextChoices):
        ONLINE = 'online', 'Online'
        PAY_LATER = 'later', 'Pay after service'

    booking_id = models.CharField(max_length=40, unique=True, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
                             null=True, blank=True, related_name='bookings')
    provider = models.ForeignKey('providers.ProviderProfile', on_delete=models.SET_NULL,
                                 null=True, blank=True, related_name='bookings')

    # Customer & address
    customer_name = models.CharField(max_length=150)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=15)
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    pincode = models.CharField(max_length=10)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    # Schedule
    scheduled_date = models.DateField(db_index=True)
    scheduled_time_slot = models.CharField(max_length=20, validators=[slot_label_validator])

    # Amounts (base values unless stated)
    sub_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    visiting_charge = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount_code = models.CharField(max_length=50, blank=True)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # Payment
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, default=PaymentMethod.ONLINE)
    gateway_order_id = models.CharField(max_length=100, blank=True)
    gateway_payment_id = models.CharField(max_length=100, blank=True)
    gateway_signature = models.CharField(max_length=255, blank=True)

    status = models.CharField(max_length=30, choices=Status.choices, default=Status.PENDING_PAYMENT, db_index=True)
    notes = models.TextField(blank=True)
    is_reviewed = models.BooleanField(default=False)

    # Cancellation
    cancellation_fee_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    cancellation_payment_id = models.CharField(max_length=100, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    invoice = models.FileField(upload_to="invoices/", blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['scheduled_date', 'scheduled_time_slot'])]

    def __str__(self):
        return f"{self.booking_id} ({self.status})"

    @property
    def is_closed(self):
        return self.status in (self.Status.COMPLETED, self.Status.CANCELLED)


class BookingItem(models.Model):
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='items')
    service = models.ForeignKey('catalog.Service', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='booking_items')
    service_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    price_at_booking = models.DecimalField(max_digits=12, decimal_places=2, help_text="Service price before any discount.")
    discounted_price_at_booking = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    is_tax_inclusive = models.BooleanField(default=False)
    tax_percent_applied = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    def __str__(self):
        return f"{self.quantity} x {self.service_name}"


class BookingPlatformFee(models.Model):
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='platform_fees')
    name = models.CharField(max_length=100)
    fee_type = models.CharField(max_length=10)
    value_applied = models.DecimalField(max_digits=10, decimal_places=2)
    calculated_fee_amount = models.DecimalField(max_digits=12, decimal_places=2)
    tax_rate_on_fee = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    tax_amount_on_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    def __str__(self):
        return f"{self.name}: {self.calculated_fee_amount}"
