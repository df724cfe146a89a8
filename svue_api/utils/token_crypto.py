import base64
import binascii
import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCMSIV
from pydantic import ValidationError

from svue_api.core.config import settings
from svue_api.core.errors import (
    DecryptError,
    InvalidCipherError,
    InvalidCredentialsError,
    InvalidKeyError,
    NoKeyError,
)
from svue_api.schemas.auth import AuthToken

NONCE_SIZE = 12
KEY_SIZE = 16


class TokenCipher:
    """AES-128-GCM-SIV over ``nonce || ciphertext`` frames."""

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_SIZE:
            raise InvalidKeyError()
        self._aead = AESGCMSIV(key)

    def encrypt(self, plaintext: str) -> bytes:
        nonce = os.urandom(NONCE_SIZE)
        return nonce + self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)

    def decrypt(self, data: bytes) -> str:
        if len(data) <= NONCE_SIZE:
            raise InvalidCipherError("Invalid length")

        try:
            plain = self._aead.decrypt(data[:NONCE_SIZE], data[NONCE_SIZE:], None)
        except InvalidTag:
            raise DecryptError()

        try:
            return plain.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidCipherError("Invalid string")


@lru_cache(maxsize=1)
def get_token_cipher() -> TokenCipher:
    # ENKEY is read once; errors are not cached so a fixed env recovers on retry
    if not settings.enkey:
        raise NoKeyError()
    try:
        key = base64.b64decode(settings.enkey, validate=True)
    except (binascii.Error, ValueError):
        raise NoKeyError()
    return TokenCipher(key)


def create_token(plaintext: str) -> bytes:
    return get_token_cipher().encrypt(plaintext)


def decrypt_token(data: bytes) -> str:
    return get_token_cipher().decrypt(data)


def encode_token(token: AuthToken) -> str:
    """Serialize, encrypt and base64 an AuthToken for the Set-Token header."""
    return base64.b64encode(create_token(token.model_dump_json())).decode("ascii")


def decode_token(value: str) -> AuthToken:
    try:
        raw = base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidCredentialsError()

    plaintext = decrypt_token(raw)
    try:
        return AuthToken.model_validate_json(plaintext)
    except ValidationError:
        raise InvalidCredentialsError()
