from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time

from focusflow_backend.config import settings


_ACCESS_TOKEN_VERSION = "v1"


def _hmac_sha256(secret: str, message: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    # URL-safe and slightly shorter.
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def make_access_token(user_id: str, now_ts: int | None = None) -> str:
    """Create a signed bearer token. Minted by the identity layer after sign-in.

    Token format (dot-separated):
      version.exp.user_id.nonce.sig
    """

    now = int(now_ts if now_ts is not None else time.time())
    exp = now + int(settings.access_token_max_age_seconds)
    nonce = secrets.token_urlsafe(16)
    payload = f"{_ACCESS_TOKEN_VERSION}.{exp}.{user_id}.{nonce}"
    sig = _hmac_sha256(settings.access_token_secret, payload)
    return f"{payload}.{sig}"


def verify_access_token(token: str | None, now_ts: int | None = None) -> dict[str, object] | None:
    """Verify and parse a bearer token.

    Returns None if invalid/expired, else {"user_id": str, "exp": int}.
    """

    if not token:
        return None

    parts = token.split(".")
    if len(parts) != 5:
        return None

    v, exp_s, user_id, nonce, sig = parts
    if v != _ACCESS_TOKEN_VERSION:
        return None
    if not exp_s.isdigit() or not user_id or not nonce:
        return None

    exp = int(exp_s)
    now = int(now_ts if now_ts is not None else time.time())
    if exp < now:
        return None

    payload = f"{v}.{exp}.{user_id}.{nonce}"
    expected = _hmac_sha256(settings.access_token_secret, payload)
    if not secrets.compare_digest(sig, expected):
        return None

    return {"user_id": user_id, "exp": exp}
