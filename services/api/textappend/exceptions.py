"""Exception hierarchy for the text append service."""


class TextAppendError(Exception):
    """Base class for all service errors."""


class CollaboratorError(TextAppendError):
    """An external collaborator was unreachable or returned an error."""

    collaborator = "unknown"


class StoreError(CollaboratorError):
    """The shared resource store failed (probe, read or write)."""

    collaborator = "store"


class ThresholdSourceError(CollaboratorError):
    """The threshold source could not supply a value."""

    collaborator = "threshold"


class RoutingError(CollaboratorError):
    """The routing control plane rejected or failed a call."""

    collaborator = "routing"


class AlertError(CollaboratorError):
    """An alert sink failed to deliver a notification."""

    collaborator = "alerts"


class AppendSlotBusy(TextAppendError):
    """No append slot became free within the configured wait."""

    def __init__(self, wait_seconds: float) -> None:
        super().__init__(f"append slot busy for {wait_seconds:.1f}s")
        self.wait_seconds = wait_seconds
