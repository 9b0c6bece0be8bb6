"""
Bearer-token verification against Firebase Auth, plus an in-memory verifier
for tests and local runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "fitsocial"


class TokenVerificationError(Exception):
    """Raised when an ID token cannot be verified."""


@dataclass(frozen=True)
class AuthClaims:
    """The subset of decoded token claims the API relies on."""

    uid: str
    email: Optional[str] = None
    sign_in_provider: Optional[str] = None

    @classmethod
    def from_decoded_token(cls, decoded: dict) -> "AuthClaims":
        firebase_info = decoded.get("firebase") or {}
        uid = decoded.get("uid") or decoded.get("sub")
        if not uid:
            raise TokenVerificationError("Token has no subject")
        return cls(
            uid=uid,
            email=decoded.get("email"),
            sign_in_provider=firebase_info.get("sign_in_provider"),
        )


class TokenVerifier(Protocol):
    """Verifies a bearer token and returns its claims."""

    def verify(self, token: str) -> AuthClaims:
        ...


class FirebaseTokenVerifier:
    """
    Delegates verification to the Firebase Admin SDK.
    """

    def __init__(
        self,
        *,
        project_id: Optional[str] = None,
        credentials_path: Optional[str] = None,
        check_revoked: bool = False,
    ):
        self.check_revoked = check_revoked
        self.app = self._get_or_init_app(project_id, credentials_path)

    @staticmethod
    def _get_or_init_app(
        project_id: Optional[str], credentials_path: Optional[str]
    ) -> firebase_admin.App:
        try:
            return firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            pass
        if credentials_path:
            credential = credentials.Certificate(credentials_path)
        else:
            credential = credentials.ApplicationDefault()
        options = {"projectId": project_id} if project_id else None
        return firebase_admin.initialize_app(
            credential, options=options, name=FIREBASE_APP_NAME
        )

    def verify(self, token: str) -> AuthClaims:
        try:
            decoded = firebase_auth.verify_id_token(
                token, app=self.app, check_revoked=self.check_revoked
            )
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise TokenVerificationError(str(exc)) from exc
        return AuthClaims.from_decoded_token(decoded)


@dataclass
class InMemoryTokenVerifier:
    """Token -> claims table. Unknown tokens are rejected."""

    tokens: Dict[str, AuthClaims] = field(default_factory=dict)

    def register(
        self,
        token: str,
        uid: str,
        email: Optional[str] = None,
        sign_in_provider: Optional[str] = "password",
    ) -> AuthClaims:
        claims = AuthClaims(uid=uid, email=email, sign_in_provider=sign_in_provider)
        self.tokens[token] = claims
        return claims

    def revoke(self, token: str) -> None:
        self.tokens.pop(token, None)

    def reset(self) -> None:
        self.tokens.clear()

    def verify(self, token: str) -> AuthClaims:
        claims = self.tokens.get(token)
        if claims is None:
            raise TokenVerificationError("Unknown token")
        return claims


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None
