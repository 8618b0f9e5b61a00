"""Exception types for Trade Journal."""


class TradeJournalError(Exception):
    """Base class for all Trade Journal errors."""


class ImportFormatError(TradeJournalError):
    """Raised when an imported file cannot be turned into trades.

    These are user-correctable: the message is shown as-is and the user is
    expected to pick another file.
    """


class InsufficientTradesError(TradeJournalError):
    """Raised when there are too few trades for a meaningful analysis."""

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(
            f"A minimum of {required} trades is required for a meaningful "
            f"analysis ({actual} logged)."
        )
