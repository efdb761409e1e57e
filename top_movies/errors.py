"""Domain errors for feed sync.

- FetchError: remote feed failures (network / bad_response / decode)
- StorageError: local store failures (io / not_found)
- ValidationError: rejected user rating (out_of_range / non_numeric)
- CacheError: fast cache failures, always absorbed inside the cache
"""

from __future__ import annotations

from typing import Literal

FetchErrorKind = Literal["network", "bad_response", "decode"]
StorageErrorKind = Literal["io", "not_found"]
ValidationErrorKind = Literal["out_of_range", "non_numeric"]


class MovieSyncError(RuntimeError):
    pass


class FetchError(MovieSyncError):
    def __init__(self, kind: FetchErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class StorageError(MovieSyncError):
    def __init__(self, kind: StorageErrorKind, message: str):
        super().__init__(message)
        self.kind = kind

    @classmethod
    def not_found(cls, movie_id: str) -> StorageError:
        return cls("not_found", f"Movie {movie_id} not found")


class ValidationError(MovieSyncError):
    """Invalid user rating. Not to be confused with pydantic.ValidationError."""

    def __init__(self, kind: ValidationErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class CacheError(MovieSyncError):
    pass


class SessionClosedError(MovieSyncError):
    pass
