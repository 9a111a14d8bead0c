class ProviderApplicationError(Exception):
    """Raised when an onboarding step or review action is not allowed."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message
