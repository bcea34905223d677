from enum import Enum
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from walletauth.core.dependencies import (
    get_authenticator,
    get_current_account_id,
    get_current_identity,
)
from walletauth.schemas.user import CurrentUserResponse
from walletauth.services.wallet_authenticator import WalletAuthenticator

router = APIRouter()
group_tags: List[str | Enum] = ["user"]


@router.get(
    "/me",
    tags=group_tags,
    response_model=CurrentUserResponse,
    status_code=status.HTTP_200_OK,
)
def get_me(
    identity: Dict[str, Any] = Depends(get_current_identity),
    account_id: str = Depends(get_current_account_id),
    authenticator: WalletAuthenticator = Depends(get_authenticator),
) -> CurrentUserResponse:
    """
    Return the authenticated caller.

    Headers:
    - Authorization: Bearer <token> from /auth/verify

    Returns:
    - account_id and the wallet that logged in
    - every wallet linked to the account
    """
    account = authenticator.get_account(account_id)
    return CurrentUserResponse(
        account_id=account["account_id"],
        wallet=identity["wallet_address"],
        wallets=account["wallets"],
    )
