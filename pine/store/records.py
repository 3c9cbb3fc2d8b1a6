"""
Credential Records — record model and the line-oriented text codec.

Plaintext format (before encryption), one record per line::

    username,kind:value,description

Lines are joined by ``\\n``. Fields are not escaped, so ``,`` is rejected in
every field when a record is built. ``:`` is allowed: the secret field is
split on its first colon only.

Control characters below 0x10 (tab and line breaks included) are rejected
too: those byte values are read as padding when they end a 16-byte chunk.
Fields must also encode to UTF-8, so lone surrogates are refused.
"""
import logging
from enum import Enum
from collections.abc import Iterable

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from .exceptions import DecodeError

logger = logging.getLogger("pine.store")

FIELD_SEPARATOR = ","
KIND_SEPARATOR = ":"
RECORD_SEPARATOR = "\n"
MASK_CHAR = "•"

_PAD_BYTE_LIMIT = 0x10


def _check_delimiters(value: str, field: str) -> str:
    if FIELD_SEPARATOR in value:
        raise ValueError(f"{field} cannot contain {FIELD_SEPARATOR!r}")
    if any(ord(char) < _PAD_BYTE_LIMIT for char in value):
        raise ValueError(f"{field} cannot contain control characters")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError(f"{field} is not valid UTF-8 text") from None
    return value


class SecretKind(str, Enum):
    PASSWORD = "password"
    PIN = "pin"


class Secret(BaseModel):
    """A password or a PIN. PIN digits are kept as text."""

    kind: SecretKind
    value: str

    model_config = {"frozen": True}

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        if not v:
            raise ValueError("Secret value cannot be empty")
        return _check_delimiters(v, "Secret value")

    @model_validator(mode="after")
    def validate_pin_digits(self) -> "Secret":
        """A PIN holds ASCII digits only."""
        if self.kind is SecretKind.PIN and not (
            self.value.isascii() and self.value.isdigit()
        ):
            raise ValueError("PIN must contain digits only")
        return self

    @classmethod
    def password(cls, value: str) -> "Secret":
        return cls(kind=SecretKind.PASSWORD, value=value)

    @classmethod
    def pin(cls, value: str) -> "Secret":
        return cls(kind=SecretKind.PIN, value=value)

    @classmethod
    def parse(cls, field: str) -> "Secret":
        """Build a Secret from its ``kind:value`` form.

        Raises:
            ValueError: If the separator is missing or the kind is unknown.
        """
        kind, sep, value = field.partition(KIND_SEPARATOR)
        if not sep:
            raise ValueError("secret field has no kind separator")
        try:
            secret_kind = SecretKind(kind)
        except ValueError:
            raise ValueError(f"unknown secret kind {kind!r}") from None
        return cls(kind=secret_kind, value=value)

    def reveal(self, hidden: bool = True) -> str:
        """Return the clear value, or a mask of the same length when hidden."""
        if hidden:
            return MASK_CHAR * len(self.value)
        return self.value

    def __str__(self) -> str:
        return f"{self.kind.value}{KIND_SEPARATOR}{self.value}"

    def __repr__(self) -> str:
        return f"Secret(kind={self.kind.value!r}, value=<hidden>)"


class CredentialRecord(BaseModel):
    """One stored credential: username, secret and a free-text description."""

    username: str
    secret: Secret
    description: str = ""

    model_config = {"frozen": True}

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v:
            raise ValueError("Username cannot be empty")
        return _check_delimiters(v, "Username")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Trim surrounding whitespace, then reject delimiters."""
        return _check_delimiters(v.strip(), "Description")

    def to_line(self) -> str:
        return FIELD_SEPARATOR.join(
            (self.username, str(self.secret), self.description)
        )


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def encode_records(records: Iterable[CredentialRecord]) -> str:
    """Serialize records to the plaintext blob, preserving order."""
    return RECORD_SEPARATOR.join(record.to_line() for record in records)


def decode_line(line: str, lineno: int | None = None) -> CredentialRecord:
    """Parse a single ``username,kind:value,description`` line.

    Raises:
        DecodeError: If the line is malformed.
    """
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) < 2:
        raise DecodeError("missing secret field", lineno)
    username = fields[0]
    description = fields[2] if len(fields) > 2 else ""
    try:
        secret = Secret.parse(fields[1])
        return CredentialRecord(
            username=username, secret=secret, description=description,
        )
    except ValidationError as err:
        reason = err.errors()[0]["msg"] if err.errors() else str(err)
        raise DecodeError(reason, lineno) from None
    except ValueError as err:
        raise DecodeError(str(err), lineno) from None


def decode_records(text: str) -> list[CredentialRecord]:
    """Parse a plaintext blob into records; empty lines are skipped.

    Raises:
        DecodeError: On the first malformed line.
    """
    records = []
    for lineno, line in enumerate(text.split(RECORD_SEPARATOR), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line:
            continue
        records.append(decode_line(line, lineno))
    logger.debug("Decoded %d record(s)", len(records))
    return records
