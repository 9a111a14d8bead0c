class SchedulingError(Exception):
    """Base exception for schedule selection."""


class PastDateError(SchedulingError):
    pass


class InvalidSlotError(SchedulingError):
    pass
