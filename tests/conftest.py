import os

# settings are read at import time, so the test environment goes first
os.environ["ENCODE_KEY"] = "test-encode-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator

from main import app
from walletauth.db.base import Base
from walletauth.db.session import get_db
import walletauth.models.accounts  # noqa: F401


# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Well-known throwaway keys, never used outside tests
PRIVATE_KEY_1 = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
PRIVATE_KEY_2 = "0x8da4ef21b864d2cc526dbdb2a120bd2874c36c9d0a1fb7f8c63d7f7a8b41de8f"


def _sign_text(account, message: str) -> str:
    signed = Account.sign_message(encode_defunct(text=message), private_key=account.key)
    return "0x" + bytes(signed.signature).hex()


@pytest.fixture(autouse=True)
def fresh_database() -> Generator:
    """Every test starts from empty tables"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def override_get_db() -> Generator:
    """Override database dependency for testing"""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the FastAPI application"""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_factory():
    """Session class bound to the test database"""
    return TestingSessionLocal


@pytest.fixture
def db_session() -> Generator:
    """A session on the test database, for service level tests"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sign_text():
    """personal_sign a message the way MetaMask does, returning 0x-prefixed hex"""
    return _sign_text


@pytest.fixture
def wallet():
    return Account.from_key(PRIVATE_KEY_1)


@pytest.fixture
def other_wallet():
    return Account.from_key(PRIVATE_KEY_2)


@pytest.fixture
def login(client: TestClient, sign_text):
    """Run the nonce/sign/verify cycle for a wallet and return the verify response body"""

    def _login(account) -> dict:
        nonce_res = client.post("/auth/request-nonce", json={"wallet": account.address})
        assert nonce_res.status_code == 200
        signature = sign_text(account, nonce_res.json()["message"])
        verify_res = client.post(
            "/auth/verify", json={"wallet": account.address, "signature": signature}
        )
        assert verify_res.status_code == 200
        return verify_res.json()

    return _login
