"""Notification pipeline exceptions."""


class MalformedEventError(ValueError):
    """Raised when an inbound payload cannot be turned into an Event.

    This is the only error that aborts the pipeline; nothing is delivered
    for the payload.
    """


class DispatchCancelledError(Exception):
    """Raised inside a dispatch branch when its cancellation token fires.

    Branches convert it into a cancelled outcome; it never escapes the
    router or the enricher.
    """
