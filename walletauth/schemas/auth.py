from typing import List, Optional

from pydantic import BaseModel, Field


class NonceRequest(BaseModel):
    """Request model for nonce generation - input validation"""

    wallet: Optional[str] = Field(None, description="Wallet address (0x...)")


class NonceResponse(BaseModel):
    """Response model for nonce generation - output"""

    wallet: str
    nonce: str
    message: str = Field(..., description="Exact text the wallet must sign")


class VerifyRequest(BaseModel):
    """Request model for wallet verification - input validation"""

    wallet: Optional[str] = Field(None, description="Wallet address (0x...)")
    signature: Optional[str] = Field(None, description="personal_sign signature of the challenge message")


class AuthResponse(BaseModel):
    """Response model for authentication - output"""

    token: str
    token_type: str = "bearer"
    wallet: str


class LinkNonceResponse(BaseModel):
    account_id: str
    nonce: str
    message: str


class LinkWalletRequest(BaseModel):
    wallet: Optional[str] = Field(None, description="Wallet address to link (0x...)")
    signature: Optional[str] = Field(None, description="Signature of the link challenge by that wallet")


class AccountResponse(BaseModel):
    account_id: str
    wallets: List[str] = []


class ErrorResponse(BaseModel):
    error: str
