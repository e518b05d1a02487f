from __future__ import annotations


class MatchingError(Exception):
    """Base class for failures raised by the matching core."""


class StoreError(MatchingError):
    """A data-store read failed. Recoverable: scoring continues for other candidates."""


class ProfileNotFound(StoreError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"Profile {user_id} not found")
        self.user_id = user_id


class PersistenceError(MatchingError):
    """Writing a match failed. The scored candidate is still available to the caller for a retry."""
