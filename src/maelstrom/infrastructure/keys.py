"""Signing key loading for auth tokens.

The key is read once at startup and held for the process lifetime.  Only
unencrypted PEM EC private keys on P-256 (ES256) are accepted, in either
SEC1 (``EC PRIVATE KEY``) or PKCS#8 (``PRIVATE KEY``) form.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from jose import jwt

from maelstrom.config.errors import KeyDecodeError, KeyFileOpenError, KeyFileReadError

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"


class SigningKey:
    """Decoded ES256 signing key handle.

    The repr never shows key material.
    """

    __slots__ = ("_pem", "algorithm", "path", "private_key")

    def __init__(self, path: Path, private_key: ec.EllipticCurvePrivateKey, pem: str) -> None:
        self.path = path
        self.private_key = private_key
        self.algorithm = ALGORITHM
        self._pem = pem

    def __repr__(self) -> str:
        return f"SigningKey(path={str(self.path)!r}, algorithm={self.algorithm!r})"

    def sign(self, claims: dict[str, Any]) -> str:
        """Encode *claims* as a compact JWT signed with this key."""
        return jwt.encode(claims, self._pem, algorithm=self.algorithm)

    def public_pem(self) -> str:
        """PEM encoded public half, for token verifiers."""
        public = self.private_key.public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return public.decode("ascii")


def decode_signing_key(data: bytes, path: Path) -> SigningKey:
    """Decode PEM bytes into a :class:`SigningKey`.

    Raises:
        KeyDecodeError: Not PEM, encrypted, not EC, or not on P-256.
    """
    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyDecodeError(path, str(exc) or type(exc).__name__) from exc

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise KeyDecodeError(path, f"expected an EC private key, got {type(key).__name__}")
    if not isinstance(key.curve, ec.SECP256R1):
        raise KeyDecodeError(path, f"expected curve secp256r1 for ES256, got {key.curve.name}")

    pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")
    return SigningKey(path, key, pem)


def load_signing_key(path: Path) -> SigningKey:
    """Open, fully read, and decode the key file at *path*.

    Raises:
        KeyFileOpenError: The file cannot be opened.
        KeyFileReadError: The file cannot be fully read.
        KeyDecodeError: The contents are not a valid ES256 private key.
    """
    try:
        fh = path.open("rb")
    except OSError as exc:
        raise KeyFileOpenError(path, exc) from exc

    with fh:
        try:
            data = fh.read()
        except OSError as exc:
            raise KeyFileReadError(path, exc) from exc

    key = decode_signing_key(data, path)
    logger.debug("Loaded %s signing key from %s", key.algorithm, path)
    return key
