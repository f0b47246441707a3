"""
Key Store
---------
Loads or generates the Ed25519 keypair used to sign and verify tokens.

On-disk layout inside the key directory:
- private.key: 64 raw bytes (32-byte seed followed by the 32-byte public key), mode 0600
- public.key:  32 raw bytes, mode 0644

Both files exist together or neither does. Partial presence, a wrong byte
length or halves that do not belong together are all fatal (KeyIOError).
Existing keys are never overwritten, so pre-provisioned keys are safe.
"""

import hashlib
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)
from loguru import logger

from token_auth.auth.errors import KeyIOError

PRIVATE_KEY_FILENAME = "private.key"
PUBLIC_KEY_FILENAME = "public.key"

SEED_SIZE = 32
PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = SEED_SIZE + PUBLIC_KEY_SIZE


@dataclass(frozen=True)
class KeyPair:
    """Immutable signing/verification key material."""

    private_key: ed25519.Ed25519PrivateKey
    public_key: ed25519.Ed25519PublicKey
    public_bytes: bytes

    @property
    def key_id(self) -> str:
        """Short fingerprint of the public key, carried in token headers."""
        return hashlib.sha256(self.public_bytes).hexdigest()[:16]


def _raw_public(public_key: ed25519.Ed25519PublicKey) -> bytes:
    return public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)


def _write_atomic(path: Path, data: bytes, mode: int) -> None:
    """Write data to a temp file in the same directory, then rename into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class KeyStore:
    """
    Filesystem-backed source of the token keypair.

    Usage:
        store = KeyStore("keys")
        store.ensure()
        keys = store.load()
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    @property
    def private_key_path(self) -> Path:
        return self.directory / PRIVATE_KEY_FILENAME

    @property
    def public_key_path(self) -> Path:
        return self.directory / PUBLIC_KEY_FILENAME

    def keys_exist(self) -> bool:
        """
        Check whether both key files are present.

        Raises:
            KeyIOError: If exactly one of the two files exists
        """
        has_private = self.private_key_path.exists()
        has_public = self.public_key_path.exists()

        if has_private != has_public:
            present = self.private_key_path if has_private else self.public_key_path
            raise KeyIOError(
                f"Incomplete keypair in {self.directory}: only {present.name} exists"
            )
        return has_private and has_public

    def ensure(self) -> None:
        """
        Generate and persist a new keypair unless one already exists.

        Idempotent: when both files exist nothing is touched.

        Raises:
            KeyIOError: If the directory, key generation or either write fails,
                or if only one of the key files is present
        """
        if self.keys_exist():
            logger.debug(f"Keypair already present in {self.directory}")
            return

        try:
            self.directory.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create key directory {self.directory}: {e}")
            raise KeyIOError(f"Failed to create key directory: {e}") from e

        try:
            private_key = ed25519.Ed25519PrivateKey.generate()
            seed = private_key.private_bytes(
                Encoding.Raw, PrivateFormat.Raw, NoEncryption()
            )
            public_bytes = _raw_public(private_key.public_key())
        except Exception as e:
            logger.error(f"Failed to generate keypair: {e}")
            raise KeyIOError(f"Failed to generate keys: {e}") from e

        try:
            _write_atomic(self.private_key_path, seed + public_bytes, 0o600)
        except OSError as e:
            logger.error(f"Failed to write private key: {e}")
            raise KeyIOError(f"Failed to write private key: {e}") from e

        try:
            _write_atomic(self.public_key_path, public_bytes, 0o644)
        except OSError as e:
            # Do not leave a lone private key behind
            try:
                self.private_key_path.unlink(missing_ok=True)
            except OSError as cleanup_error:
                logger.error(
                    f"Failed to remove {self.private_key_path} after partial write: "
                    f"{cleanup_error}"
                )
            logger.error(f"Failed to write public key: {e}")
            raise KeyIOError(f"Failed to write public key: {e}") from e

        logger.info(f"Generated new Ed25519 keypair in {self.directory}")

    def load(self) -> KeyPair:
        """
        Read both key files and validate them.

        Returns:
            KeyPair: Loaded key material

        Raises:
            KeyIOError: If a file is missing or unreadable, has the wrong size,
                or the private and public halves do not match
        """
        try:
            private_bytes = self.private_key_path.read_bytes()
        except OSError as e:
            raise KeyIOError(f"Failed to read private key: {e}") from e

        try:
            public_bytes = self.public_key_path.read_bytes()
        except OSError as e:
            raise KeyIOError(f"Failed to read public key: {e}") from e

        if len(private_bytes) != PRIVATE_KEY_SIZE:
            raise KeyIOError(
                f"Invalid private key size: expected {PRIVATE_KEY_SIZE}, "
                f"got {len(private_bytes)}"
            )

        if len(public_bytes) != PUBLIC_KEY_SIZE:
            raise KeyIOError(
                f"Invalid public key size: expected {PUBLIC_KEY_SIZE}, "
                f"got {len(public_bytes)}"
            )

        private_key = ed25519.Ed25519PrivateKey.from_private_bytes(
            private_bytes[:SEED_SIZE]
        )
        derived_public = _raw_public(private_key.public_key())

        if derived_public != private_bytes[SEED_SIZE:] or derived_public != public_bytes:
            raise KeyIOError(f"Private and public key in {self.directory} do not match")

        logger.info(f"Loaded Ed25519 keypair from {self.directory}")
        return KeyPair(
            private_key=private_key,
            public_key=ed25519.Ed25519PublicKey.from_public_bytes(public_bytes),
            public_bytes=public_bytes,
        )
