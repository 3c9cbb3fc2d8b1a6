"""Pine Store — passphrase-encrypted credential file.

Security Note (Threat Model):
    The key is derived with a fixed salt and blocks are encrypted
    independently (ECB-equivalent) with no integrity tag. Identical
    plaintext blocks are visible as identical ciphertext blocks, and
    tampering is not reliably detected. Decrypted records live in process
    memory while in use. These are accepted limitations of the file format.
"""

from .config import StoreConfig
from .crypto import BlockCipher, derive_key, pad, unpad
from .events import StoreAction, StoreEvent, StoreOutcome, load, persist
from .exceptions import (
    DecodeError,
    PadError,
    StoreError,
    StoreIOError,
    UnpadError,
)
from .records import (
    CredentialRecord,
    Secret,
    SecretKind,
    decode_records,
    encode_records,
)
from .storage import Storage, fetch, new_storage, save

__all__ = [
    "Storage",
    "new_storage",
    "save",
    "fetch",
    "StoreConfig",
    "BlockCipher",
    "derive_key",
    "pad",
    "unpad",
    "CredentialRecord",
    "Secret",
    "SecretKind",
    "encode_records",
    "decode_records",
    "StoreError",
    "StoreIOError",
    "PadError",
    "UnpadError",
    "DecodeError",
    "StoreAction",
    "StoreEvent",
    "StoreOutcome",
    "persist",
    "load",
]
