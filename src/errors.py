class PaymentsError(Exception):
    """Base class for failures that abort a whole run."""
    pass


class TransactionSourceError(PaymentsError):
    """Input is missing, unreadable, or not a transaction CSV at all."""
    pass


class StateSinkError(PaymentsError):
    """Final client states could not be written."""
    pass
