"""
JWT Token Utilities

This module handles JSON Web Token (JWT) creation and verification for wallet authentication.
After a user successfully verifies their wallet signature, this module creates a JWT token
that can be used for subsequent authenticated API requests.

Flow:
1. User verifies wallet signature -> create_access_token() generates JWT
2. User makes API request with JWT in Authorization header -> verify_token() validates it
3. Protected endpoints use get_current_identity() from dependencies.py to read the claims

The JWT contains:
- wallet_address: The wallet that signed the login challenge (lower-case)
- account_id: The account that wallet belongs to
- iat: Issued at timestamp
- exp: Expiration timestamp (configurable via ACCESS_TOKEN_EXPIRE_SECONDS)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from walletauth.core.config import settings
from walletauth.core.errors import Unauthenticated


if not settings.ENCODE_KEY:
    raise RuntimeError("ENCODE_KEY is not configured")


def create_access_token(
    wallet_address: str,
    account_id: Optional[str] = None,
) -> str:
    """
    Create a JWT access token for an authenticated wallet address.

    This is called after successful wallet signature verification in /auth/verify endpoint.
    The token is returned to the frontend and used in subsequent API requests.

    Args:
        wallet_address: The wallet address that was verified
        account_id: The account owning the wallet

    Returns:
        A JWT token string that can be used in Authorization: Bearer <token> header

    Raises:
        ValueError: If wallet_address is empty
    """
    if not wallet_address:
        raise ValueError("wallet_address is required")

    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "wallet_address": wallet_address,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS)).timestamp()),
    }
    if account_id:
        payload["account_id"] = account_id

    return jwt.encode(payload, settings.ENCODE_KEY, algorithm=settings.ENCODE_ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Checks token signature, expiration, and required payload fields.

    Args:
        token: The JWT token string from Authorization header

    Returns:
        Decoded JWT payload dictionary containing wallet_address and other claims

    Raises:
        Unauthenticated: If token is missing, expired, invalid, or missing wallet_address
    """
    if not token:
        raise Unauthenticated("Missing token")

    try:
        payload = jwt.decode(token, settings.ENCODE_KEY, algorithms=[settings.ENCODE_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token")

    if not payload.get("wallet_address"):
        raise Unauthenticated("Invalid token payload")

    return payload
