"""Errors raised by the routine versioning engine."""


class RoutineTrackerError(Exception):
    """Base class for routine tracker errors."""


class MalformedSnapshotError(RoutineTrackerError):
    """Raised when a snapshot payload is missing required diet or item data."""


class GatewayLoadError(RoutineTrackerError):
    """Raised when the latest version or current snapshot cannot be loaded."""


class GatewaySaveError(RoutineTrackerError):
    """Raised when a new routine version cannot be persisted."""


class SaveInProgressError(RoutineTrackerError):
    """Raised when a save is requested while another one is still running."""


class TrackerNotReadyError(RoutineTrackerError):
    """Raised when a tracker operation needs a loaded baseline."""


class NoChangesToSaveError(GatewaySaveError):
    """Raised when saving a version identical to the latest one."""


class RoutineVersionNotFoundError(RoutineTrackerError):
    """Raised when a routine version does not exist for the user."""
