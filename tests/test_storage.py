"""
Tests for Storage persistence.

Tests cover:
- save/fetch round-trip and full overwrite
- Directory creation and on-disk format
- Failure surfaces: missing file, misaligned file, unwritable path
- Immutability and sharing of the Storage handle
"""
import asyncio

import pytest

from pine.store import (
    CredentialRecord,
    DecodeError,
    PadError,
    Secret,
    Storage,
    StoreConfig,
    StoreIOError,
    fetch,
    new_storage,
    save,
)
from pine.store.crypto import BlockCipher


# --- Test Fixtures ---

@pytest.fixture(scope="module")
def cipher():
    return BlockCipher.from_passphrase("    ")


@pytest.fixture
def storage(tmp_path, cipher):
    """Storage writing under a temp directory."""
    return Storage(cipher, directory=str(tmp_path / ".store"))


@pytest.fixture
def records():
    return [
        CredentialRecord(
            username="alice",
            secret=Secret.password("hunter2"),
            description="work login",
        ),
        CredentialRecord(username="bob", secret=Secret.pin("0042")),
        CredentialRecord(
            username="zoë",
            secret=Secret.password("pä:ss"),
            description="café ☕",
        ),
    ]


# --- Test Round Trip ---

class TestRoundTrip:
    """Tests for save followed by fetch."""

    @pytest.mark.asyncio
    async def test_alice_scenario(self, tmp_path):
        """Test the single-record scenario through the public API."""
        config = StoreConfig(directory=str(tmp_path / ".store"))
        storage = new_storage("    ", config)
        await save(storage, [
            CredentialRecord(
                username="alice",
                secret=Secret.password("hunter2"),
                description="work login",
            ),
        ])

        reloaded = await fetch(new_storage("    ", config))

        assert len(reloaded) == 1
        assert reloaded[0].username == "alice"
        assert reloaded[0].secret == Secret.password("hunter2")
        assert reloaded[0].description == "work login"

    @pytest.mark.asyncio
    async def test_roundtrip_preserves_order(self, storage, records):
        """Test every record comes back in order."""
        await storage.save(records)
        assert await storage.fetch() == records

    @pytest.mark.asyncio
    async def test_save_overwrites(self, storage, records):
        """Test each save replaces the whole file."""
        await storage.save(records)
        await storage.save(records[:1])
        assert await storage.fetch() == records[:1]

    @pytest.mark.asyncio
    async def test_empty_store(self, storage):
        """Test saving no records yields an empty, readable file."""
        await storage.save([])
        assert storage.path.read_bytes() == b""
        assert await storage.fetch() == []

    def test_chunk_boundary_characters_survive(self, storage):
        """Test the lowest allowed characters survive at a 16-byte boundary."""
        boundary = [
            CredentialRecord(username="a" * 15 + "\x10", secret=Secret.password("x")),
            CredentialRecord(username="b" * 15 + "\x1f", secret=Secret.pin("7")),
        ]
        storage.write(boundary)
        assert storage.read() == boundary

    @pytest.mark.asyncio
    async def test_surrogate_passphrase(self, tmp_path, records):
        """Test a passphrase that is not valid UTF-8 still opens a store."""
        config = StoreConfig(directory=str(tmp_path / ".store"))
        await save(new_storage("\ud800", config), records)
        assert await fetch(new_storage("\ud800", config)) == records

    def test_sync_roundtrip(self, storage, records):
        """Test the synchronous write/read pair."""
        storage.write(records)
        assert storage.read() == records

    @pytest.mark.asyncio
    async def test_concurrent_fetches(self, storage, records):
        """Test one Storage can serve concurrent fetches."""
        await storage.save(records)
        first, second = await asyncio.gather(storage.fetch(), storage.fetch())
        assert first == second == records


# --- Test On-Disk Format ---

class TestFileFormat:
    """Tests for the ciphertext file."""

    def test_directory_created(self, tmp_path, cipher, records):
        """Test missing parent directories are created."""
        storage = Storage(cipher, directory=str(tmp_path / "a" / "b"))
        storage.write(records)
        assert (tmp_path / "a" / "b" / "store.aes").is_file()

    def test_file_is_block_aligned(self, storage, records):
        """Test the file holds whole 16-byte blocks only."""
        storage.write(records)
        data = storage.path.read_bytes()
        assert data
        assert len(data) % 16 == 0

    def test_plaintext_not_on_disk(self, storage, records):
        """Test secrets never appear in clear in the file."""
        storage.write(records)
        data = storage.path.read_bytes()
        assert b"hunter2" not in data
        assert b"alice" not in data

    def test_default_location(self):
        """Test the default file path."""
        storage = new_storage("x")
        assert storage.path.as_posix() == ".store/store.aes"


# --- Test Failures ---

class TestFailures:
    """Tests for error reporting."""

    @pytest.mark.asyncio
    async def test_missing_file(self, storage):
        """Test fetch on a missing file is an I/O error, not an empty list."""
        with pytest.raises(StoreIOError) as exc:
            await storage.fetch()
        assert isinstance(exc.value.cause, FileNotFoundError)
        assert isinstance(exc.value.__cause__, FileNotFoundError)

    @pytest.mark.asyncio
    async def test_misaligned_file(self, storage):
        """Test a 17-byte file is a PadError, never a partial parse."""
        storage.directory.mkdir(parents=True)
        storage.path.write_bytes(b"\x01" * 17)
        with pytest.raises(PadError):
            await storage.fetch()

    @pytest.mark.asyncio
    async def test_unwritable_directory(self, tmp_path, cipher, records):
        """Test a directory path blocked by a file is an I/O error."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        storage = Storage(cipher, directory=str(blocker / "store"))
        with pytest.raises(StoreIOError):
            await storage.save(records)

    @pytest.mark.asyncio
    async def test_wrong_passphrase(self, storage, records):
        """Test a different passphrase cannot read the records back."""
        await storage.save(records)
        intruder = Storage(
            BlockCipher.from_passphrase("guess"),
            directory=str(storage.directory),
        )
        with pytest.raises(DecodeError):
            await intruder.fetch()


# --- Test Storage Handle ---

class TestStorageHandle:
    """Tests for the Storage object itself."""

    def test_immutable(self, storage):
        """Test attributes cannot be reassigned."""
        with pytest.raises(AttributeError):
            storage.file_name = "other.aes"
        with pytest.raises(AttributeError):
            storage._cipher = None

    def test_repr_hides_key(self, storage):
        """Test repr shows the path only."""
        assert "store.aes" in repr(storage)
        assert "cipher" not in repr(storage).lower()

    def test_custom_file_name(self, tmp_path):
        """Test the config file name is used."""
        config = StoreConfig(directory=str(tmp_path), file_name="vault.bin")
        storage = new_storage("pw", config)
        assert storage.path == tmp_path / "vault.bin"
