"""
Wallet login flow.

request_nonce -> wallet signs challenge_message(nonce) -> verify -> JWT.

Nonce state per account: a nonce is always outstanding once the account
exists. request_nonce replaces it, a successful verify consumes and replaces
it, a failed verify leaves it in place so the client can retry.
"""

import logging
from typing import Any, Dict, List

from walletauth.core import jwt_utils
from walletauth.core.errors import (
    AccountNotFound,
    InvalidInput,
    SignatureMismatch,
    WalletAlreadyLinked,
)
from walletauth.core.wallet_signature import (
    challenge_message,
    generate_nonce,
    is_wallet_address,
    link_challenge_message,
    normalize_address,
    verify_signature,
)
from walletauth.models.accounts import Account
from walletauth.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)


class WalletAuthenticator:
    def __init__(self, store: IdentityStore) -> None:
        self.store = store

    def request_nonce(self, wallet_address: str | None) -> Dict[str, str]:
        """Issue a fresh login challenge, creating the account on first sight."""
        wallet = normalize_address(wallet_address)
        if not wallet:
            raise InvalidInput("Wallet required")
        if not is_wallet_address(wallet):
            raise InvalidInput("Invalid wallet address")

        nonce = generate_nonce()
        account = self.store.find_by_wallet(wallet)
        if account is None:
            self.store.create_account(wallet, nonce)
        else:
            self.store.set_nonce(account.id, nonce)

        return {"wallet": wallet, "nonce": nonce, "message": challenge_message(nonce)}

    def verify(self, wallet_address: str | None, signature: str | None) -> Dict[str, str]:
        """Check the signature over the current challenge and issue a session token."""
        wallet = normalize_address(wallet_address)
        if not wallet or not signature or not signature.strip():
            raise InvalidInput("Wallet and signature required")
        if not is_wallet_address(wallet):
            raise InvalidInput("Invalid wallet address")

        account = self.store.find_by_wallet(wallet)
        if account is None:
            raise AccountNotFound()

        nonce = account.current_nonce
        self._check_signature(wallet, challenge_message(nonce), signature)
        self._consume_nonce(account, nonce)

        token = jwt_utils.create_access_token(wallet, account_id=account.id)
        logger.info("Wallet %s logged in to account %s", wallet, account.id)
        return {"token": token, "token_type": "bearer", "wallet": wallet}

    def authorize(self, token: str | None) -> Dict[str, Any]:
        """Decoded claims of a valid session token, Unauthenticated otherwise."""
        return jwt_utils.verify_token(token or "")

    def get_account(self, account_id: str | None) -> Dict[str, Any]:
        account = self._load_account(account_id)
        return {"account_id": account.id, "wallets": account.wallet_addresses}

    def request_link_nonce(self, account_id: str | None) -> Dict[str, str]:
        """Fresh challenge for an authenticated account to prove another wallet with."""
        account = self._load_account(account_id)
        nonce = generate_nonce()
        self.store.set_nonce(account.id, nonce)
        return {"account_id": account.id, "nonce": nonce, "message": link_challenge_message(nonce)}

    def link_wallet(
        self, account_id: str | None, wallet_address: str | None, signature: str | None
    ) -> Dict[str, Any]:
        """Attach a second wallet to an account.

        The new wallet signs link_challenge_message() of the account's current
        nonce, so a signed login challenge cannot be replayed here. Linking a wallet
        the account already owns succeeds without changes.
        """
        wallet = normalize_address(wallet_address)
        if not wallet or not signature or not signature.strip():
            raise InvalidInput("Wallet and signature required")
        if not is_wallet_address(wallet):
            raise InvalidInput("Invalid wallet address")

        account = self._load_account(account_id)
        if wallet in account.wallet_addresses:
            return {"account_id": account.id, "wallets": account.wallet_addresses}

        owner = self.store.wallet_owner(wallet)
        if owner is not None and owner != account.id:
            raise WalletAlreadyLinked()

        nonce = account.current_nonce
        self._check_signature(wallet, link_challenge_message(nonce), signature)
        self._consume_nonce(account, nonce)
        self.store.add_wallet(account.id, wallet)
        logger.info("Linked wallet %s to account %s", wallet, account.id)

        return {"account_id": account.id, "wallets": self._wallets_of(account.id)}

    def _load_account(self, account_id: str | None) -> Account:
        account = self.store.get_account(account_id) if account_id else None
        if account is None:
            raise AccountNotFound()
        return account

    def _wallets_of(self, account_id: str) -> List[str]:
        return self._load_account(account_id).wallet_addresses

    def _check_signature(self, wallet: str, message: str, signature: str) -> None:
        is_valid, _ = verify_signature(wallet, message, signature)
        if not is_valid:
            logger.warning("Signature mismatch for wallet %s", wallet)
            raise SignatureMismatch()

    def _consume_nonce(self, account: Account, nonce: str) -> None:
        if not self.store.rotate_nonce(account.id, nonce, generate_nonce()):
            # another request consumed this nonce between our read and update
            logger.warning("Nonce for account %s was already consumed", account.id)
            raise SignatureMismatch()
