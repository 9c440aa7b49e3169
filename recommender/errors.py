"""
Exception hierarchy for the Activity Recommender.

Data-driven rejections (a booking outside the advertised slots, a calendar
clash) are returned as violation records by the engine. Exceptions are kept
for contract errors and for the service boundary.
"""


class RecommenderError(Exception):
    """Base class for every error raised by this package."""


class MalformedAvailability(RecommenderError, ValueError):
    """Stored availability has an unknown type tag or lacks its payload."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class GroupSizeError(RecommenderError, ValueError):
    """Group ranking was called with fewer than two user profiles."""


class NotFoundError(RecommenderError, LookupError):
    """A user or activity requested from the catalog does not exist."""


class BookingRejected(RecommenderError):
    """A booking failed availability or calendar validation."""

    def __init__(self, violation):
        super().__init__(violation.reason)
        self.violation = violation
