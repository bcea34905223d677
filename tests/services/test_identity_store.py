import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from unittest.mock import Mock

from walletauth.core.errors import StoreUnavailable, WalletAlreadyLinked
from walletauth.db.session import init_db
from walletauth.models.accounts import Account, AccountWallet
from walletauth.services.identity_store import IdentityStore


class TestIdentityStore:
    """Test cases for the SQLAlchemy identity store"""

    def test_create_and_find(self, db_session):
        store = IdentityStore(db_session)

        created = store.create_account("0xabc", "n1")
        found = store.find_by_wallet("0xabc")

        assert found is not None
        assert found.id == created.id
        assert found.current_nonce == "n1"
        assert found.wallet_addresses == ["0xabc"]

    def test_find_unknown(self, db_session):
        assert IdentityStore(db_session).find_by_wallet("0xnone") is None

    def test_concurrent_create_reuses_account(self, db_session, session_factory):
        """Two sessions creating the same wallet end with one account"""
        first = IdentityStore(db_session).create_account("0xabc", "n1")

        other_session = session_factory()
        try:
            second = IdentityStore(other_session).create_account("0xabc", "n2")
            assert second.id == first.id
        finally:
            other_session.close()

        db_session.expire_all()
        assert db_session.query(Account).count() == 1
        assert db_session.query(AccountWallet).count() == 1
        assert IdentityStore(db_session).find_by_wallet("0xabc").current_nonce == "n2"

    def test_set_nonce(self, db_session):
        store = IdentityStore(db_session)
        account = store.create_account("0xabc", "n1")

        store.set_nonce(account.id, "n2")

        assert store.get_account(account.id).current_nonce == "n2"

    def test_rotate_nonce_compare_and_set(self, db_session):
        store = IdentityStore(db_session)
        account = store.create_account("0xabc", "n1")

        assert store.rotate_nonce(account.id, "n1", "n2") is True
        # the same expected nonce cannot be consumed twice
        assert store.rotate_nonce(account.id, "n1", "n3") is False
        assert store.get_account(account.id).current_nonce == "n2"

    def test_add_wallet(self, db_session):
        store = IdentityStore(db_session)
        account = store.create_account("0xabc", "n1")

        store.add_wallet(account.id, "0xdef")

        assert store.wallet_owner("0xdef") == account.id
        assert store.find_by_wallet("0xdef").id == account.id
        assert set(store.get_account(account.id).wallet_addresses) == {"0xabc", "0xdef"}

    def test_add_wallet_taken(self, db_session):
        store = IdentityStore(db_session)
        first = store.create_account("0xabc", "n1")
        store.create_account("0xdef", "n2")

        with pytest.raises(WalletAlreadyLinked):
            store.add_wallet(first.id, "0xdef")

    def test_wallet_owner_unknown(self, db_session):
        assert IdentityStore(db_session).wallet_owner("0xnone") is None

    def test_database_error_becomes_store_unavailable(self):
        db = Mock(spec=Session)
        db.query.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

        with pytest.raises(StoreUnavailable):
            IdentityStore(db).find_by_wallet("0xabc")

        db.rollback.assert_called_once()


class TestInitDb:
    def test_init_db_creates_tables(self):
        bind = create_engine("sqlite://")

        init_db(bind)

        with Session(bind) as db:
            assert db.query(Account).count() == 0

    def test_init_db_unreachable(self, tmp_path):
        bind = create_engine(f"sqlite:///{tmp_path}/missing/dir/auth.db")

        with pytest.raises(StoreUnavailable):
            init_db(bind)
