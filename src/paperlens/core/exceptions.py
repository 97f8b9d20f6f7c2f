"""
Exception hierarchy for PaperLens.

Every error carries a human-readable message and the HTTP status the API
layer should answer with. Upstream errors never reach the API: adapters and
the summary generator recover from them locally.
"""

from __future__ import annotations


class PaperLensError(Exception):
    """Base class for all PaperLens errors."""

    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class InvalidFilterError(PaperLensError):
    """A search filter or request body failed validation."""

    status_code = 400


class NotFoundError(PaperLensError):
    status_code = 404


class PaperNotFoundError(NotFoundError):
    def __init__(self, paper_id=None, *, doi: str | None = None):
        if doi:
            super().__init__(f"Paper not found: doi={doi}")
        else:
            super().__init__("Paper not found" if paper_id is None else f"Paper not found: {paper_id}")
        self.paper_id = paper_id
        self.doi = doi


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id=None):
        super().__init__("User not found" if user_id is None else f"User not found: {user_id}")
        self.user_id = user_id


class AlreadySavedError(PaperLensError):
    """The (user, paper) pair is already bookmarked."""

    status_code = 400

    def __init__(self, user_id: int, paper_id: int):
        super().__init__("Paper already saved")
        self.user_id = user_id
        self.paper_id = paper_id


class UpstreamError(PaperLensError):
    """An external API failed (network error, non-2xx status, bad payload)."""

    status_code = 502

    def __init__(self, message: str, *, status: int | None = None, source: str = ""):
        super().__init__(message)
        self.status = status
        self.source = source


class StoreError(PaperLensError):
    """The paper store could not be read or written."""

    status_code = 500
