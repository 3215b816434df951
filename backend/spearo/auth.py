"""
Authentication gate.

Bearer tokens are verified against the identity provider's /userinfo
endpoint; the returned claims are resolved to a local user (provisioned on
first sight). Tests override get_token_claims to skip the provider call.
"""

import logging
import os
from typing import Dict, Optional

import requests
from dotenv import load_dotenv
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from spearo.database import get_session
from spearo.models.user import User
from spearo.services.errors import AuthenticationError, SpearoError
from spearo.services.identity import resolve_user

load_dotenv()

logger = logging.getLogger(__name__)

AUTH0_ISSUER_BASE_URL = os.getenv("AUTH0_ISSUER_BASE_URL", "").rstrip("/")
AUTH0_TIMEOUT_SECONDS = float(os.getenv("AUTH0_TIMEOUT_SECONDS", "5"))

bearer_scheme = HTTPBearer(auto_error=False)


def fetch_identity_claims(token: str) -> Dict[str, Optional[str]]:
    """
    Verify a bearer token with the identity provider.

    Returns:
        dict with keys: sub, email, nickname

    Raises:
        AuthenticationError if the provider is unconfigured, unreachable,
        or rejects the token
    """
    if not AUTH0_ISSUER_BASE_URL:
        raise AuthenticationError("Identity provider is not configured (set AUTH0_ISSUER_BASE_URL)")

    try:
        response = requests.get(
            f"{AUTH0_ISSUER_BASE_URL}/userinfo",
            headers={"Authorization": f"Bearer {token}"},
            timeout=AUTH0_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error(f"Identity provider request failed: {e}")
        raise AuthenticationError("Identity provider unavailable") from e

    if response.status_code != 200:
        logger.warning(f"Identity provider rejected token (status {response.status_code})")
        raise AuthenticationError("Invalid or expired token")

    try:
        payload = response.json()
    except ValueError as e:
        logger.warning("Identity provider returned a non-JSON body")
        raise AuthenticationError("Invalid identity provider response") from e
    if not isinstance(payload, dict) or not payload.get("sub"):
        raise AuthenticationError("Token has no subject")
    return {"sub": payload["sub"], "email": payload.get("email"), "nickname": payload.get("nickname")}


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Optional[str]]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing bearer token", headers={"WWW-Authenticate": "Bearer"})
    try:
        return fetch_identity_claims(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message, headers={"WWW-Authenticate": "Bearer"})


def get_current_user(
    claims: Dict[str, Optional[str]] = Depends(get_token_claims),
    session: Session = Depends(get_session),
) -> User:
    try:
        return resolve_user(session, claims.get("sub"), claims.get("email"), claims.get("nickname"))
    except SpearoError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
