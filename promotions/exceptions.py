class PromoCodeError(Exception):
    """Raised when a promo code cannot be applied to an order."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message
