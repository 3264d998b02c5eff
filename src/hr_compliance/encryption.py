"""Field-level encryption for sensitive employee data.

Values are encrypted with Fernet (AES-128-CBC + HMAC-SHA256) before they
reach the database and decrypted when rows are loaded. The key comes from
``ENCRYPTION_KEY`` (a urlsafe base64 Fernet key) or is derived from
``ENCRYPTION_KEY_PASSWORD`` with PBKDF2. Without either, a random key is
generated for the process and anything it encrypts is unreadable after a
restart.
"""

from __future__ import annotations

import base64
import logging
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

from hr_compliance.config import Settings, get_settings

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 390_000


def derive_key(password: str, salt: str) -> bytes:
    """Derive a Fernet key from a passphrase."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt.encode("utf-8"),
        iterations=PBKDF2_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))


class EncryptionService:
    """Encrypt and decrypt short text values."""

    def __init__(self, key: bytes):
        try:
            self.cipher = Fernet(key)
        except ValueError as e:
            raise ValueError(
                "Invalid encryption key. Expected a urlsafe base64-encoded 32-byte key."
            ) from e

    @classmethod
    def from_settings(cls, settings: Settings) -> EncryptionService:
        if settings.encryption_key:
            return cls(settings.encryption_key.encode("ascii"))
        if settings.encryption_key_password:
            return cls(derive_key(settings.encryption_key_password, settings.encryption_key_salt))
        logger.warning(
            "No ENCRYPTION_KEY or ENCRYPTION_KEY_PASSWORD set; using a generated key. "
            "Encrypted fields will not survive a restart."
        )
        return cls(Fernet.generate_key())

    def encrypt(self, value: str | None) -> str | None:
        if value is None:
            return None
        return self.cipher.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str | None) -> str | None:
        if token is None:
            return None
        try:
            return self.cipher.decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken:
            logger.error("Could not decrypt a stored value; wrong ENCRYPTION_KEY?")
            raise


@lru_cache(maxsize=1)
def get_encryption_service() -> EncryptionService:
    """Process-wide service built from the current settings."""
    return EncryptionService.from_settings(get_settings())


class EncryptedString(TypeDecorator):
    """Text column stored as a Fernet token and read back as plain text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return get_encryption_service().encrypt(value)

    def process_result_value(self, value, dialect):
        return get_encryption_service().decrypt(value)
