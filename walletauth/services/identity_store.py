"""
Identity store backed by SQLAlchemy.

Maps normalized wallet addresses to accounts and holds each account's current
login nonce. Nonce consumption goes through rotate_nonce(), a conditional
UPDATE matched on the expected prior nonce, so at most one caller can consume
a given nonce even when requests race.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from walletauth.core.errors import StoreUnavailable, WalletAlreadyLinked
from walletauth.models.accounts import Account, AccountWallet

logger = logging.getLogger(__name__)


class IdentityStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Store failure during %s: %s", action, e.__class__.__name__)
            raise StoreUnavailable() from e

    def find_by_wallet(self, wallet_address: str) -> Optional[Account]:
        with self._guard("find_by_wallet"):
            return (
                self.db.query(Account)
                .join(AccountWallet, AccountWallet.account_id == Account.id)
                .filter(AccountWallet.wallet_address == wallet_address)
                .first()
            )

    def get_account(self, account_id: str) -> Optional[Account]:
        with self._guard("get_account"):
            return self.db.get(Account, account_id)

    def create_account(self, wallet_address: str, nonce: str) -> Account:
        """Create an account owning a single wallet.

        If another request created the account for this wallet first, the
        existing account gets the new nonce instead of a duplicate being made.
        """
        with self._guard("create_account"):
            account = Account(current_nonce=nonce)
            account.wallets.append(AccountWallet(wallet_address=wallet_address))
            self.db.add(account)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                existing = self.find_by_wallet(wallet_address)
                if existing is None:
                    raise
                logger.info("Account for %s created concurrently, reusing it", wallet_address)
                self.set_nonce(existing.id, nonce)
                return existing

            logger.info("Created account %s for wallet %s", account.id, wallet_address)
            return account

    def set_nonce(self, account_id: str, nonce: str) -> None:
        with self._guard("set_nonce"):
            self.db.execute(
                update(Account).where(Account.id == account_id).values(current_nonce=nonce)
            )
            self.db.commit()

    def rotate_nonce(self, account_id: str, expected_nonce: str, new_nonce: str) -> bool:
        """Replace the nonce only if it still equals expected_nonce.

        Returns False when the nonce was already consumed or replaced.
        """
        with self._guard("rotate_nonce"):
            result = self.db.execute(
                update(Account)
                .where(Account.id == account_id, Account.current_nonce == expected_nonce)
                .values(current_nonce=new_nonce)
            )
            self.db.commit()
            return result.rowcount == 1

    def wallet_owner(self, wallet_address: str) -> Optional[str]:
        with self._guard("wallet_owner"):
            wallet = self.db.get(AccountWallet, wallet_address)
            return wallet.account_id if wallet else None

    def add_wallet(self, account_id: str, wallet_address: str) -> None:
        with self._guard("add_wallet"):
            # core insert so a taken wallet always surfaces as IntegrityError
            try:
                self.db.execute(
                    insert(AccountWallet).values(wallet_address=wallet_address, account_id=account_id)
                )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise WalletAlreadyLinked()
