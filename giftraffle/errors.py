from __future__ import annotations


class RaffleError(Exception):
    """Business failure of a raffle operation, safe to show to the caller."""

    code = "error.raffle"
    status_code = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)


class NameTaken(RaffleError):
    code = "error.raffle.nameTaken"
    status_code = 400


class AlreadyJoined(RaffleError):
    code = "error.raffle.alreadyJoinedTo"
    status_code = 403


class NotFound(RaffleError):
    code = "error.raffle.notFound"
    status_code = 404


class AlreadyFinished(RaffleError):
    code = "error.raffle.alreadyFinished"
    status_code = 400


class OwnedNotFound(RaffleError):
    code = "error.raffle.ownedNotFound"
    status_code = 404


class CannotClose(RaffleError):
    code = "error.raffle.canNotClose"
    status_code = 400


class StorageConflict(RuntimeError):
    """A uniqueness constraint rejected a write."""
