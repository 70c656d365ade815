"""Errors raised at the store boundary. Adapters classify backend errors into these."""

from enum import Enum


class StoreErrorKind(str, Enum):
    SCHEMA_NOT_READY = "schema_not_ready"
    FAILURE = "failure"


class StoreError(Exception):
    """
    A store call failed. SCHEMA_NOT_READY means the backing schema has not
    been deployed yet; services treat it as a zero-effect success.
    """

    def __init__(self, message: str, kind: StoreErrorKind = StoreErrorKind.FAILURE) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind

    @property
    def schema_not_ready(self) -> bool:
        return self.kind is StoreErrorKind.SCHEMA_NOT_READY
