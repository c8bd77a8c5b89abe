"""
Account Store - Row-filtered reads and point updates on the users table.

Every write is a single unconditional UPDATE keyed by a stable identifier and
committed immediately. Nothing here reads before writing.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from boost_billing.db.models import User
from boost_billing.exceptions import StoreError
from boost_billing.models.domain import AccountData, SitemapEntry
from boost_billing.observability.metrics import metrics

logger = get_logger(__name__)


class AccountStore:
    """Entitlement store backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncIterator[None]:
        """Time a store operation and convert driver errors to StoreError."""
        start = time.perf_counter()
        try:
            yield
        except SQLAlchemyError as exc:
            metrics.record_db_query(name, False, time.perf_counter() - start)
            metrics.record_error(type(exc).__name__, name)
            logger.error("store_operation_failed", operation=name, error=str(exc))
            await self.session.rollback()
            raise StoreError(f"{name} failed") from exc
        metrics.record_db_query(name, True, time.perf_counter() - start)

    async def get_by_id(self, account_id: str) -> AccountData | None:
        """Fetch one account by primary key, or None."""
        async with self._operation("select_by_id"):
            result = await self.session.execute(select(User).where(User.id == account_id))
            user = result.scalar_one_or_none()

        if user is None:
            return None
        return AccountData(
            account_id=user.id,
            stripe_customer_id=user.stripe_customer_id,
            stripe_subscription_id=user.stripe_subscription_id,
            is_boosted=user.is_boosted,
        )

    async def update_by_id(self, account_id: str, **values: Any) -> int:
        """Assign columns on the account with this id. Returns rows affected."""
        return await self._update("update_by_id", User.id == account_id, values)

    async def update_by_subscription_id(self, subscription_id: str, **values: Any) -> int:
        """Assign columns on accounts linked to this subscription. Returns rows affected."""
        return await self._update(
            "update_by_subscription_id", User.stripe_subscription_id == subscription_id, values
        )

    async def list_sitemap_entries(self) -> list[SitemapEntry]:
        """Active accounts that have a public profile, oldest id first."""
        async with self._operation("select_active"):
            result = await self.session.execute(
                select(User.public_slug, User.updated_at)
                .where(User.is_active.is_(True), User.public_slug.is_not(None))
                .order_by(User.id)
            )
            rows = result.all()

        return [SitemapEntry(slug=row.public_slug, updated_at=row.updated_at) for row in rows]

    async def _update(self, name: str, criterion: Any, values: dict[str, Any]) -> int:
        if not values:
            raise ValueError("update requires at least one column")

        async with self._operation(name):
            result = await self.session.execute(
                update(User)
                .where(criterion)
                .values({getattr(User, key): value for key, value in values.items()})
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()

        rows: int = result.rowcount
        logger.debug("store_rows_updated", operation=name, columns=sorted(values), rows=rows)
        return rows
