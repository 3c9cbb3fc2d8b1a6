"""
Store Errors — typed failures surfaced by save/fetch.

Every failure of the credential store reaches the caller as a subclass of
``StoreError``. Each error carries a short ``message`` suitable for showing
to the user.

Security Note:
    Error messages never include plaintext, secrets or key material.
"""
from typing import Optional


class StoreError(Exception):
    """Base class for credential store failures."""

    default_message = "store error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class StoreIOError(StoreError):
    """Directory/file creation, read or write failure.

    The underlying ``OSError`` is kept on ``cause`` (and chained as
    ``__cause__`` when raised with ``from``).
    """

    def __init__(self, cause: OSError):
        self.cause = cause
        super().__init__(str(cause))


class PadError(StoreError):
    """Input exceeds padding limits, or ciphertext is not block-aligned."""

    default_message = "error while padding"


class UnpadError(StoreError):
    """An empty block was presented for unpadding."""

    default_message = "error while unpadding"


class DecodeError(StoreError):
    """A decrypted record line could not be parsed."""

    default_message = "error while decoding records"

    def __init__(self, reason: str, line: Optional[int] = None):
        self.reason = reason
        self.line = line
        if line is not None:
            super().__init__(f"record line {line}: {reason}")
        else:
            super().__init__(reason)
