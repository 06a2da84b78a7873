"""Encryption for the client technical vault (Fernet, keyed by VAULT_ENCRYPTION_KEY)"""

import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from ..config import VAULT_ENCRYPTION_KEY

logger = logging.getLogger(__name__)


class VaultError(ValueError):
    """Vault content could not be encrypted or decrypted"""


def get_cipher_suite(key: Optional[str] = None) -> Fernet:
    key = key or VAULT_ENCRYPTION_KEY
    if not key:
        raise VaultError("Vault encryption key is not configured")
    try:
        return Fernet(key.encode() if isinstance(key, str) else key)
    except (ValueError, TypeError) as e:
        raise VaultError("Vault encryption key is invalid") from e


def encrypt_vault(plaintext: str, key: Optional[str] = None) -> str:
    return get_cipher_suite(key).encrypt(plaintext.encode()).decode()


def decrypt_vault(token: str, key: Optional[str] = None) -> str:
    try:
        return get_cipher_suite(key).decrypt(token.encode()).decode()
    except InvalidToken as e:
        logger.error("❌ Vault token could not be decrypted with the configured key")
        raise VaultError("Vault content could not be decrypted") from e
