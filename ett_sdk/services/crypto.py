"""Decryption of provider secrets stored encrypted at rest."""

import base64
import binascii
import os
from typing import Protocol

from cryptography.hazmat.decrepit.ciphers.modes import CFB
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

from ett_sdk.services.notifier import Notifier, notify_in_background
from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)

IV_SIZE = 16


class DecryptionError(Exception):
    """The stored value could not be decrypted with the given key."""


class Decryptor(Protocol):
    def decrypt(self, key: str, ciphertext: str) -> str: ...


class AESDecryptor:
    """
    AES-CFB vault format: URL-safe base64 of a 16-byte IV followed by the ciphertext.
    The key is used as raw bytes and must be 16, 24 or 32 bytes long.
    """

    def decrypt(self, key: str, ciphertext: str) -> str:
        try:
            raw = base64.urlsafe_b64decode(ciphertext)
            if len(raw) < IV_SIZE:
                raise DecryptionError("ciphertext too short")
            decryptor = Cipher(algorithms.AES(key.encode()), CFB(raw[:IV_SIZE])).decryptor()
            return (decryptor.update(raw[IV_SIZE:]) + decryptor.finalize()).decode()
        except (binascii.Error, ValueError) as e:
            raise DecryptionError(str(e)) from e

    def encrypt(self, key: str, plaintext: str) -> str:
        iv = os.urandom(IV_SIZE)
        encryptor = Cipher(algorithms.AES(key.encode()), CFB(iv)).encryptor()
        ciphertext = encryptor.update(plaintext.encode()) + encryptor.finalize()
        return base64.urlsafe_b64encode(iv + ciphertext).decode()


def decrypt_with_fallback(
    decryptor: Decryptor,
    key: str,
    value: str,
    notifier: Notifier,
    label: str,
) -> str:
    """
    Decrypt `value`, falling back to the stored value as-is when decryption fails.

    Failures are usually a rotated key that has not been re-applied to stored
    secrets yet; they are logged and reported to operators in the background.
    """
    try:
        return decryptor.decrypt(key, value)
    except DecryptionError as e:
        logger.warning("secret_decrypt_failed", secret=label, error=str(e))
        notify_in_background(notifier, f"Failed to decrypt {label}: {e}")
        return value
