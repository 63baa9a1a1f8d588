"""Errors raised by the storage and ranking services."""

from ..utils.deadline import DeadlineExceededError


class StorageError(Exception):
    """A storage query failed; the request fails as a whole."""


class StorageTimeoutError(StorageError, DeadlineExceededError):
    """A storage query exceeded its bounded wait."""


class ResortNotFoundError(LookupError):
    """The requested resort identifier does not resolve."""

    def __init__(self, resort_id: str):
        super().__init__(f"Resort {resort_id} not found")
        self.resort_id = resort_id
