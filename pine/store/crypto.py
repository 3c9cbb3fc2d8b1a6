"""
Store Crypto Core — key derivation, block padding and the block cipher.

Implements the encryption layer of the credential store:
- Key: PBKDF2-HMAC-SHA256(passphrase, "salt", 100000) → 16 bytes
- Cipher: AES-128 applied to each 16-byte block independently (ECB-equivalent)
- Padding: PKCS#7-style per chunk, with a fail-open unpad

Security Note:
    The salt is fixed and blocks are not chained, so identical passphrases
    give identical keys and identical plaintext blocks give identical
    ciphertext blocks. There is no integrity tag: corrupted ciphertext is not
    reliably detected. This is the on-disk format existing stores rely on.
    Never log passphrases, keys, plaintext or ciphertext values.
"""
import logging
from collections.abc import Iterator

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .exceptions import PadError, UnpadError

logger = logging.getLogger("pine.store")

SALT = b"salt"
ITERATIONS = 100_000
KEY_LENGTH = 16  # AES-128
BLOCK_SIZE = 16
_MAX_PAD_INPUT = 255


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(passphrase: str) -> bytes:
    """Derive the 16-byte store key from a passphrase.

    Args:
        passphrase: User passphrase; any string, including empty or one
            holding lone surrogates.

    Returns:
        16-byte derived key. Same passphrase always gives the same key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=SALT,  # Fixed: existing stores were written with this salt
        iterations=ITERATIONS,
    )
    # Lone surrogates are encoded as is so any str derives a key
    return kdf.derive(passphrase.encode("utf-8", errors="surrogatepass"))


# ---------------------------------------------------------------------------
# Padding
# ---------------------------------------------------------------------------

def pad(block: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    """Pad ``block`` up to ``block_size`` bytes.

    Appends ``n = block_size - len(block)`` bytes each of value ``n``.
    A block already ``block_size`` long is returned as is.

    Raises:
        PadError: If the block or block_size exceeds 255 bytes, or the block
            is longer than block_size.
    """
    if (
        len(block) > _MAX_PAD_INPUT
        or block_size > _MAX_PAD_INPUT
        or block_size < len(block)
    ):
        raise PadError()
    n = block_size - len(block)
    return bytes(block) + bytes([n]) * n


def unpad(block: bytes) -> bytes:
    """Strip PKCS#7-style padding from a decrypted block.

    Fails open: when the trailing bytes do not form valid padding the block
    is returned unchanged.

    Raises:
        UnpadError: If the block is empty.
    """
    if not block:
        raise UnpadError()
    n = block[-1]
    if len(block) > _MAX_PAD_INPUT or n == 0 or n >= len(block):
        return block
    start = len(block) - n
    if any(value != n for value in block[start:]):
        return block
    return block[:start]


def chunks(data: bytes, size: int = BLOCK_SIZE) -> Iterator[bytes]:
    """Yield consecutive ``size``-byte slices of data; the last may be shorter."""
    for offset in range(0, len(data), size):
        yield data[offset:offset + size]


# ---------------------------------------------------------------------------
# Block cipher
# ---------------------------------------------------------------------------

class BlockCipher:
    """AES block engine keyed once with a derived key.

    Each call builds its own encryptor/decryptor context, so a single
    instance can be shared between threads.
    """

    __slots__ = ("_cipher",)

    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH:
            raise ValueError(
                f"Key must be exactly {KEY_LENGTH} bytes, got {len(key)}"
            )
        self._cipher = Cipher(algorithms.AES(key), modes.ECB())

    def __repr__(self) -> str:
        return "<BlockCipher AES-128>"

    @classmethod
    def from_passphrase(cls, passphrase: str) -> "BlockCipher":
        return cls(derive_key(passphrase))

    @staticmethod
    def _check(block: bytes) -> None:
        if len(block) != BLOCK_SIZE:
            raise ValueError(
                f"Block must be exactly {BLOCK_SIZE} bytes, got {len(block)}"
            )

    def encrypt_block(self, block: bytes) -> bytes:
        """Encrypt one 16-byte block."""
        self._check(block)
        encryptor = self._cipher.encryptor()
        return encryptor.update(block) + encryptor.finalize()

    def decrypt_block(self, block: bytes) -> bytes:
        """Decrypt one 16-byte block."""
        self._check(block)
        decryptor = self._cipher.decryptor()
        return decryptor.update(block) + decryptor.finalize()


# ---------------------------------------------------------------------------
# Blob encryption
# ---------------------------------------------------------------------------

def encrypt_blob(plaintext: bytes, cipher: BlockCipher) -> bytes:
    """Split plaintext into 16-byte chunks, pad and encrypt each one.

    Returns:
        Concatenated ciphertext blocks; empty for empty plaintext.
    """
    buffer = bytearray()
    for chunk in chunks(plaintext):
        buffer += cipher.encrypt_block(pad(chunk, BLOCK_SIZE))
    logger.debug("Encrypted %d block(s)", len(buffer) // BLOCK_SIZE)
    return bytes(buffer)


def decrypt_blob(ciphertext: bytes, cipher: BlockCipher) -> bytes:
    """Decrypt and unpad each 16-byte block of ciphertext.

    Raises:
        PadError: If the ciphertext length is not a multiple of 16.
    """
    if len(ciphertext) % BLOCK_SIZE:
        raise PadError(
            f"ciphertext length {len(ciphertext)} is not a multiple "
            f"of {BLOCK_SIZE}"
        )
    buffer = bytearray()
    for chunk in chunks(ciphertext):
        buffer += unpad(cipher.decrypt_block(chunk))
    logger.debug("Decrypted %d block(s)", len(ciphertext) // BLOCK_SIZE)
    return bytes(buffer)
