from __future__ import annotations

import logging
import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.core.config import settings

logger = logging.getLogger(__name__)
NONCE_SIZE = 12


@lru_cache(maxsize=1)
def _get_cipher() -> AESGCM:
    return AESGCM(settings.encryption_key_bytes)


def encrypt_token(token: str) -> bytes:
    """카카오 액세스 토큰을 AES-GCM으로 암호화한다 (nonce 12바이트 + 암호문)."""
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = _get_cipher().encrypt(nonce, token.encode("utf-8"), None)
    return nonce + ciphertext


def decrypt_token(blob: bytes | None) -> str | None:
    if not blob or len(blob) <= NONCE_SIZE:
        return None
    nonce, data = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    try:
        plaintext = _get_cipher().decrypt(nonce, data, None)
    except InvalidTag:
        # 키가 교체되었거나 손상된 값은 토큰이 없는 것으로 취급
        logger.warning("액세스 토큰 복호화 실패 (키 불일치 또는 손상된 값)")
        return None
    return plaintext.decode("utf-8")
