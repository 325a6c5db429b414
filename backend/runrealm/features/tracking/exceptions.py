"""
Run tracking errors.
"""


class RunTrackingError(Exception):
    """Base run tracking error."""
    pass


class RunAlreadyInProgressError(RunTrackingError):
    """start requested while a run is recording."""

    def __init__(self, message: str = "A run is already in progress"):
        super().__init__(message)


class LocationUnavailableError(RunTrackingError):
    """The location source could not provide a starting fix."""
    pass


class ActivityImportError(RunTrackingError):
    """An external activity could not be decoded."""
    pass
