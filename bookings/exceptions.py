"""
Custom exceptions for the bookings app.
"""


class BookingError(Exception):
    """Base exception for booking-related errors."""
    default_message = "Booking could not be completed."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class EmptyCartError(BookingError):
    default_message = "Your cart is empty."


class CheckoutIncompleteError(BookingError):
    default_message = "Please complete the schedule and address steps first."


class CartServiceMissingError(BookingError):
    default_message = "Some cart services not found. Booking aborted."


class SlotUnavailableError(BookingError):
    """Raised when the chosen slot is full or no longer bookable."""
    default_message = "The selected time slot is no longer available. Please choose another."


class PaymentMethodError(BookingError):
    default_message = "The selected payment method is not available for this booking."


class BookingStateError(BookingError):
    """Raised when a booking cannot move to the requested status."""
    default_message = "This action is not allowed for the booking in its current status."
