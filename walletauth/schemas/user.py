from typing import List

from pydantic import BaseModel


class CurrentUserResponse(BaseModel):
    """Identity of the caller, read from the session token and the store
    Example:
    {
        "account_id": "550e8400-e29b-41d4-a716-446655440000",
        "wallet": "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        "wallets": ["0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"]
    }
    """

    account_id: str
    wallet: str
    wallets: List[str] = []


class HealthCheck(BaseModel):
    status: str = "oke"
