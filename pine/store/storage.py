"""
Storage — the encrypted credential file.

Provides the public API of the credential store:
- ``Storage.from_passphrase(passphrase)`` — derive the key once at startup
- ``save(records)`` — encrypt the full record list and overwrite the file
- ``fetch()`` — read, decrypt and parse every record

``save`` and ``fetch`` are coroutines that run the blocking work in a worker
thread, so they can be awaited from a UI event loop. ``write`` and ``read``
are the synchronous equivalents.

Security Note:
    Never log passphrases, keys, plaintext or ciphertext values. Only log
    paths and record/block counts. There is no file locking: when two saves
    race, the last writer wins.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional
from collections.abc import Iterable

from .config import StoreConfig
from .crypto import BlockCipher, decrypt_blob, encrypt_blob
from .exceptions import StoreIOError
from .records import CredentialRecord, decode_records, encode_records

logger = logging.getLogger("pine.store")


class Storage:
    """Key-bound handle on the store file.

    Holds the keyed block cipher, the store directory and the file name.
    Nothing is mutated after construction; re-keying means building a new
    Storage. Instances can be shared between concurrent tasks.
    """

    __slots__ = ("_cipher", "_directory", "_file_name")

    def __init__(
        self,
        cipher: BlockCipher,
        directory: str = ".store",
        file_name: str = "store.aes",
    ):
        object.__setattr__(self, "_cipher", cipher)
        object.__setattr__(self, "_directory", Path(directory))
        object.__setattr__(self, "_file_name", file_name)

    def __setattr__(self, key: str, value) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"<Storage path={str(self.path)!r}>"

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def path(self) -> Path:
        return self._directory / self._file_name

    # ------------------------------------------------------------------
    # Synchronous API
    # ------------------------------------------------------------------

    def write(self, records: Iterable[CredentialRecord]) -> None:
        """Encrypt all records and replace the store file.

        Raises:
            PadError: If a chunk cannot be padded.
            StoreIOError: If the directory or file cannot be written.
        """
        records = list(records)
        plaintext = encode_records(records).encode("utf-8")
        ciphertext = encrypt_blob(plaintext, self._cipher)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with open(self.path, "wb") as fp:
                fp.write(ciphertext)
        except OSError as err:
            logger.debug("Store write failed for %s: %s", self.path, err)
            raise StoreIOError(err) from err
        logger.debug("Store saved: %d record(s) to %s", len(records), self.path)

    def read(self) -> list[CredentialRecord]:
        """Read, decrypt and parse the store file.

        Raises:
            StoreIOError: If the file is missing or unreadable.
            PadError: If the file length is not a multiple of 16.
            UnpadError: If an empty block is met.
            DecodeError: If a record line cannot be parsed.
        """
        try:
            with open(self.path, "rb") as fp:
                ciphertext = fp.read()
        except OSError as err:
            logger.debug("Store read failed for %s: %s", self.path, err)
            raise StoreIOError(err) from err
        plaintext = decrypt_blob(ciphertext, self._cipher)
        records = decode_records(plaintext.decode("utf-8", errors="replace"))
        logger.debug("Store fetched: %d record(s) from %s", len(records), self.path)
        return records

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def save(self, records: Iterable[CredentialRecord]) -> None:
        """Persist the complete record list, overwriting the store file."""
        await asyncio.to_thread(self.write, list(records))

    async def fetch(self) -> list[CredentialRecord]:
        """Load every record from the store file."""
        return await asyncio.to_thread(self.read)

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_passphrase(
        cls,
        passphrase: str,
        config: Optional[StoreConfig] = None,
    ) -> "Storage":
        """Derive the store key from a passphrase and bind it to a location.

        Args:
            passphrase: User passphrase; never stored.
            config: Store location; defaults to ``.store/store.aes``.

        Returns:
            Ready-to-use Storage instance.
        """
        config = config or StoreConfig()
        storage = cls(
            BlockCipher.from_passphrase(passphrase),
            directory=config.directory,
            file_name=config.file_name,
        )
        logger.info("Store opened at %s", storage.path)
        return storage


def new_storage(passphrase: str, config: Optional[StoreConfig] = None) -> Storage:
    """Build a Storage from a passphrase. Always succeeds."""
    return Storage.from_passphrase(passphrase, config)


async def save(storage: Storage, records: Iterable[CredentialRecord]) -> None:
    """Persist records through ``storage``; raises StoreError on failure."""
    await storage.save(records)


async def fetch(storage: Storage) -> list[CredentialRecord]:
    """Load records through ``storage``; raises StoreError on failure."""
    return await storage.fetch()
