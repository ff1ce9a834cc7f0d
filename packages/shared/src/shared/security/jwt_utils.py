from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import hashlib
import hmac
import json
from typing import Any


def _urlsafe_b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _urlsafe_b64decode(raw: str) -> bytes:
    padding = "=" * ((4 - len(raw) % 4) % 4)
    return base64.urlsafe_b64decode((raw + padding).encode("ascii"))


@dataclass(frozen=True)
class AuthTokenPayload:
    sub: str
    email: str | None
    role: str
    aud: str
    exp: int
    iat: int
    session_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sub": self.sub,
            "role": self.role,
            "aud": self.aud,
            "exp": self.exp,
            "iat": self.iat,
        }
        if self.email is not None:
            payload["email"] = self.email
        if self.session_id is not None:
            payload["session_id"] = self.session_id
        return payload


class JWTManager:
    """HS256 access-token verifier for tokens minted by the hosted auth provider.

    The provider signs access tokens with the project's shared secret and sets
    ``aud`` to ``authenticated`` for signed-in users. ``issue_access_token``
    mints the same shape for local development and tests.
    """

    def __init__(self, secret: str, audience: str = "authenticated", access_minutes: int = 60) -> None:
        if not secret:
            raise ValueError("JWT secret cannot be empty")
        self._secret = secret.encode("utf-8")
        self._audience = audience
        self._access_minutes = access_minutes

    def issue_access_token(
        self,
        subject: str,
        email: str | None = None,
        role: str = "authenticated",
        session_id: str | None = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = AuthTokenPayload(
            sub=subject,
            email=email,
            role=role,
            aud=self._audience,
            iat=int(now.timestamp()),
            exp=int((now + timedelta(minutes=self._access_minutes)).timestamp()),
            session_id=session_id,
        )
        return self._encode(payload.to_dict())

    def decode(self, token: str) -> AuthTokenPayload:
        try:
            header_raw, payload_raw, sig_raw = token.split(".")
        except ValueError as exc:
            raise ValueError("malformed token") from exc
        signed = f"{header_raw}.{payload_raw}".encode("ascii")
        expected = _urlsafe_b64encode(hmac.new(self._secret, signed, hashlib.sha256).digest())
        if not hmac.compare_digest(expected, sig_raw):
            raise ValueError("invalid token signature")
        try:
            payload_obj = json.loads(_urlsafe_b64decode(payload_raw))
        except ValueError as exc:
            raise ValueError("malformed token payload") from exc
        exp = int(payload_obj.get("exp", 0))
        if exp <= int(datetime.now(timezone.utc).timestamp()):
            raise ValueError("token expired")
        audience = payload_obj.get("aud", "")
        audiences = audience if isinstance(audience, list) else [audience]
        if self._audience not in audiences:
            raise ValueError("invalid token audience")
        subject = str(payload_obj.get("sub", ""))
        if not subject:
            raise ValueError("token has no subject")
        email = payload_obj.get("email")
        session_id = payload_obj.get("session_id")
        return AuthTokenPayload(
            sub=subject,
            email=str(email) if email else None,
            role=str(payload_obj.get("role", "")),
            aud=self._audience,
            exp=exp,
            iat=int(payload_obj.get("iat", 0)),
            session_id=str(session_id) if session_id else None,
        )

    def _encode(self, payload: dict[str, Any]) -> str:
        header = {"alg": "HS256", "typ": "JWT"}
        header_raw = _urlsafe_b64encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
        payload_raw = _urlsafe_b64encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
        signed = f"{header_raw}.{payload_raw}".encode("ascii")
        sig = _urlsafe_b64encode(hmac.new(self._secret, signed, hashlib.sha256).digest())
        return f"{header_raw}.{payload_raw}.{sig}"
