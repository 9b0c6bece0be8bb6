"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from typing import Iterator

from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from fitsocial.auth import (
    AuthClaims,
    FirebaseTokenVerifier,
    InMemoryTokenVerifier,
    TokenVerificationError,
    TokenVerifier,
    parse_bearer_token,
)
from fitsocial.config import get_settings
from fitsocial.db import Database, UserRow
from fitsocial.storage import InMemoryStorageClient, S3StorageClient, StorageClient

logger = logging.getLogger(__name__)

_database: Database | None = None
_token_verifier: TokenVerifier | None = None
_storage_client: StorageClient | None = None


def get_database() -> Database:
    """
    Return a singleton database so engine and pool are shared across requests.
    """
    global _database
    if _database:
        return _database

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _database = Database()
    else:
        _database = Database(settings.database_url)
    return _database


def get_db_session() -> Iterator[Session]:
    """One session per request; anything left uncommitted is rolled back."""
    session = get_database().session()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_token_verifier() -> TokenVerifier:
    global _token_verifier
    if _token_verifier:
        return _token_verifier

    settings = get_settings()
    if settings.use_in_memory_backends or not (
        settings.firebase_project_id or settings.firebase_credentials_path
    ):
        logger.warning(
            "Firebase is not configured; using the in-memory token verifier"
        )
        _token_verifier = InMemoryTokenVerifier()
    else:
        _token_verifier = FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            credentials_path=settings.firebase_credentials_path,
            check_revoked=settings.firebase_check_revoked,
        )
    return _token_verifier


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.storage_bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.storage_bucket,
            region=settings.storage_region or "",
            endpoint=settings.storage_endpoint,
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    return _storage_client


def get_current_claims(
    authorization: str | None = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AuthClaims:
    """
    Require ``Authorization: Bearer <token>`` and return the verified claims.
    """
    token = parse_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="No token provided.")
    try:
        return verifier.verify(token)
    except TokenVerificationError as exc:
        logger.warning("Error verifying token: %s", exc)
        raise HTTPException(status_code=401, detail="Unauthorized.")


def get_current_user(
    claims: AuthClaims = Depends(get_current_claims),
    db: Session = Depends(get_db_session),
) -> UserRow:
    """Resolve the signed-in account to its synced user record."""
    user = db.execute(
        select(UserRow).where(UserRow.firebase_uid == claims.uid)
    ).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return user
