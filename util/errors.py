# util/errors.py
from typing import Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)


class ProviderError(Exception):
    """
    The embedding/generation provider failed (quota, timeout, invalid input).
    The only error allowed to abort a request.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"


class TierError(Exception):
    """
    A vector index or store call failed. Callers absorb it and degrade.
    """

    def __init__(self, tier: str, operation: str, cause: BaseException) -> None:
        super().__init__(f"{tier}.{operation} failed: {type(cause).__name__}: {cause}")
        self.tier = tier
        self.operation = operation
        self.cause = cause

    @property
    def kind(self) -> str:
        return type(self.cause).__name__


class MalformedResultError(ValueError):
    # Flow: raised per result document; the document is dropped, the rest kept.
    def __init__(self, tier: str, doc_id: str, reason: str) -> None:
        super().__init__(f"{tier} doc={doc_id}: {reason}")
        self.tier = tier
        self.doc_id = doc_id
        self.reason = reason
