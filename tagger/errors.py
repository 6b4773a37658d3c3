"""Tagger exceptions."""


class TransportFailure(Exception):
    """A call to the messaging platform failed or timed out.

    Transports raise this with the original exception chained as
    ``__cause__`` so callers can classify it for the user.
    """

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}" if message else f"{operation} failed")
