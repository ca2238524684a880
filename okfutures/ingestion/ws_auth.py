"""HMAC-SHA256 login signing for the OKEx v3 WebSocket API."""

from __future__ import annotations

import base64
import time
from typing import Protocol

from cryptography.hazmat.primitives import hashes, hmac

LOGIN_METHOD = "GET"
LOGIN_PATH = "/users/self/verify"


class Signer(Protocol):
    def sign(self, message: str, secret: str) -> str: ...


def epoch_time() -> str:
    """Unix time in seconds with millisecond precision, e.g. '1586650000.123'."""
    return f"{time.time():.3f}"


def pre_hash_string(timestamp: str, method: str, path: str, body: str = "") -> str:
    """Canonical string signed for login: timestamp + METHOD + path + body."""
    return timestamp + method.upper() + path + body


class HmacSha256Signer:
    """Signs pre-hash strings with HMAC-SHA256 and returns base64 text."""

    def sign(self, message: str, secret: str) -> str:
        mac = hmac.HMAC(secret.encode(), hashes.SHA256())
        mac.update(message.encode())
        return base64.b64encode(mac.finalize()).decode()


def login_args(
    signer: Signer,
    access_key: str,
    secret_key: str,
    passphrase: str,
    timestamp: str | None = None,
) -> list[str]:
    """Build the args of a login op: [access_key, passphrase, timestamp, sign]."""
    timestamp = timestamp or epoch_time()
    message = pre_hash_string(timestamp, LOGIN_METHOD, LOGIN_PATH)
    signature = signer.sign(message, secret_key)
    return [access_key, passphrase, timestamp, signature]
