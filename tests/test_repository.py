"""
Tests for AccountStore against a mocked AsyncSession.
"""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from boost_billing.db.models import User
from boost_billing.db.repository import AccountStore
from boost_billing.exceptions import StoreError


class TestGetById:
    """Tests for AccountStore.get_by_id."""

    @pytest.mark.asyncio
    async def test_found(self, db_session):
        user = User(
            id="u1",
            stripe_customer_id="cus_1",
            stripe_subscription_id="sub_1",
            is_boosted=True,
        )
        db_session.execute.return_value.scalar_one_or_none.return_value = user

        account = await AccountStore(db_session).get_by_id("u1")

        assert account is not None
        assert account.account_id == "u1"
        assert account.stripe_customer_id == "cus_1"
        assert account.stripe_subscription_id == "sub_1"
        assert account.is_boosted is True

    @pytest.mark.asyncio
    async def test_missing(self, db_session):
        assert await AccountStore(db_session).get_by_id("ghost") is None

    @pytest.mark.asyncio
    async def test_driver_error_becomes_store_error(self, db_session):
        db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(StoreError):
            await AccountStore(db_session).get_by_id("u1")

        db_session.rollback.assert_awaited_once()


class TestUpdates:
    """Tests for the point-update methods."""

    @pytest.mark.asyncio
    async def test_update_by_id_commits_and_returns_rowcount(self, db_session):
        db_session.execute.return_value.rowcount = 1

        rows = await AccountStore(db_session).update_by_id("u1", stripe_customer_id="cus_1")

        assert rows == 1
        db_session.execute.assert_awaited_once()
        db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_by_subscription_id_zero_rows(self, db_session):
        db_session.execute.return_value.rowcount = 0

        rows = await AccountStore(db_session).update_by_subscription_id(
            "sub_unknown", is_boosted=True
        )

        assert rows == 0
        db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_statement_targets_users(self, db_session):
        db_session.execute.return_value.rowcount = 2

        await AccountStore(db_session).update_by_subscription_id("sub_1", is_boosted=False)

        statement = db_session.execute.await_args.args[0]
        compiled = str(statement)
        assert compiled.startswith("UPDATE users SET est_booste=")
        assert "stripe_subscription_id" in compiled

    @pytest.mark.asyncio
    async def test_empty_values_rejected(self, db_session):
        with pytest.raises(ValueError):
            await AccountStore(db_session).update_by_id("u1")

        db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, db_session):
        db_session.commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("conn reset"))
        )

        with pytest.raises(StoreError):
            await AccountStore(db_session).update_by_id("u1", is_boosted=True)

        db_session.rollback.assert_awaited_once()


class TestListSitemapEntries:
    """Tests for AccountStore.list_sitemap_entries."""

    @pytest.mark.asyncio
    async def test_maps_rows(self, db_session):
        stamp = datetime(2024, 6, 1, 12, 30, tzinfo=UTC)
        db_session.execute.return_value.all = MagicMock(
            return_value=[
                SimpleNamespace(public_slug="alice", updated_at=stamp),
                SimpleNamespace(public_slug="bob", updated_at=None),
            ]
        )

        entries = await AccountStore(db_session).list_sitemap_entries()

        assert [entry.slug for entry in entries] == ["alice", "bob"]
        assert entries[0].updated_at == stamp
        assert entries[1].updated_at is None
