"""
FastAPI Authentication Dependencies
This module provides FastAPI dependency functions that can be injected into route handlers
to build the authenticator and to extract and validate JWT tokens from the Authorization header.
Usage in endpoints:
    @router.get("/protected")
    def protected_route(identity: dict = Depends(get_current_identity)):
        # identity holds wallet_address and account_id from the JWT
        return {"user": identity["wallet_address"]}
Flow:
1. Client sends request with Authorization: Bearer <token> header
2. FastAPI calls get_current_identity() dependency
3. _extract_token() extracts token from header
4. WalletAuthenticator.authorize() validates the JWT (via jwt_utils.py)
5. Returns the decoded claims to the route handler
"""

from typing import Any, Dict, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from walletauth.core.errors import Unauthenticated
from walletauth.db.session import get_db
from walletauth.services.identity_store import IdentityStore
from walletauth.services.wallet_authenticator import WalletAuthenticator


def get_authenticator(db: Session = Depends(get_db)) -> WalletAuthenticator:
    return WalletAuthenticator(IdentityStore(db))


def _extract_token(authorization: Optional[str]) -> str:
    """
    Extract JWT token from Authorization header.
    Supports both "Bearer <token>" and plain token formats.
    Args:
        authorization: The Authorization header value (e.g., "Bearer eyJ...")
    Returns:
        The extracted token string
    Raises:
        Unauthenticated: If Authorization header is missing or invalid
    """
    if not authorization:
        raise Unauthenticated("Authorization header missing")

    authorization = authorization.strip()
    if authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
    else:
        token = authorization
    if not token:
        raise Unauthenticated("Invalid authorization header")

    return token


def get_current_identity(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    authenticator: WalletAuthenticator = Depends(get_authenticator),
) -> Dict[str, Any]:
    """
    returning decoded token claims (wallet_address, account_id).
    """
    return authenticator.authorize(_extract_token(authorization))


def get_current_account_id(identity: Dict[str, Any] = Depends(get_current_identity)) -> str:
    account_id = identity.get("account_id")
    if not account_id:
        raise Unauthenticated("Invalid token payload")
    return str(account_id)
