"""Exception types raised by the draft, wizard and submission layers."""


class DeliveryQuoteError(Exception):
    """Base class for delivery quote errors."""


class StopIndexError(DeliveryQuoteError, IndexError):
    """A stop operation referenced an index outside the current stop list."""

    def __init__(self, index: int, length: int):
        super().__init__(f"Stop index {index} out of range for {length} stop(s)")
        self.index = index
        self.length = length


class WizardClosedError(DeliveryQuoteError):
    """The wizard session was already submitted or exited."""


class SubmissionError(DeliveryQuoteError):
    """The order creator did not return a usable order."""
