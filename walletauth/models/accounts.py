import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from walletauth.db.base import Base


def _new_account_id() -> str:
    return str(uuid.uuid4())


class Account(Base):
    """Model for accounts table
    Example:
    {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "current_nonce": "9f2c0b...e41a",
        "created_at": "2024-01-01T12:00:00",
        "updated_at": "2024-01-01T12:00:00"
    }
    """

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_account_id)
    current_nonce = Column(String(128), nullable=False)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    wallets = relationship(
        "AccountWallet",
        back_populates="account",
        order_by="AccountWallet.linked_at",
        lazy="selectin",
    )

    @property
    def wallet_addresses(self) -> list[str]:
        return [wallet.wallet_address for wallet in self.wallets]


class AccountWallet(Base):
    """Wallet address owned by an account. One account may own several wallets,
    a wallet belongs to at most one account."""

    __tablename__ = "account_wallets"

    wallet_address = Column(String(255), primary_key=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    linked_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    account = relationship("Account", back_populates="wallets")
