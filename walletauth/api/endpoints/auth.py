from enum import Enum
from typing import List

from fastapi import APIRouter, Depends, status

from walletauth.core.dependencies import get_authenticator, get_current_account_id
import walletauth.schemas.auth as schemas
from walletauth.services.wallet_authenticator import WalletAuthenticator

router = APIRouter()
group_tags: List[str | Enum] = ["Auth"]

error_responses = {
    status.HTTP_400_BAD_REQUEST: {"model": schemas.ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": schemas.ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": schemas.ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": schemas.ErrorResponse},
}


@router.post(
    "/request-nonce",
    tags=group_tags,
    response_model=schemas.NonceResponse,
    responses=error_responses,
)
def request_nonce(
    body: schemas.NonceRequest,
    authenticator: WalletAuthenticator = Depends(get_authenticator),
) -> schemas.NonceResponse:
    """Generate and store a login nonce for a wallet address.

    The client signs `message` with personal_sign and sends the result to /auth/verify.
    """
    return schemas.NonceResponse(**authenticator.request_nonce(body.wallet))


@router.post(
    "/verify",
    tags=group_tags,
    response_model=schemas.AuthResponse,
    responses=error_responses,
)
def verify_wallet(
    body: schemas.VerifyRequest,
    authenticator: WalletAuthenticator = Depends(get_authenticator),
) -> schemas.AuthResponse:
    """Verify a signed nonce and return an access token."""
    return schemas.AuthResponse(**authenticator.verify(body.wallet, body.signature))


@router.post(
    "/link-nonce",
    tags=group_tags,
    response_model=schemas.LinkNonceResponse,
    responses=error_responses,
)
def request_link_nonce(
    account_id: str = Depends(get_current_account_id),
    authenticator: WalletAuthenticator = Depends(get_authenticator),
) -> schemas.LinkNonceResponse:
    """Issue a challenge that a second wallet signs to join the caller's account."""
    return schemas.LinkNonceResponse(**authenticator.request_link_nonce(account_id))


@router.post(
    "/link-wallet",
    tags=group_tags,
    response_model=schemas.AccountResponse,
    responses={
        **error_responses,
        status.HTTP_409_CONFLICT: {"model": schemas.ErrorResponse},
    },
)
def link_wallet(
    body: schemas.LinkWalletRequest,
    account_id: str = Depends(get_current_account_id),
    authenticator: WalletAuthenticator = Depends(get_authenticator),
) -> schemas.AccountResponse:
    """Link another wallet to the caller's account."""
    return schemas.AccountResponse(
        **authenticator.link_wallet(account_id, body.wallet, body.signature)
    )
