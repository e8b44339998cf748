"""
Ledger Accessor

Fetches the income or expense records an analysis needs, surviving a
misbehaving ledger store.

STRATEGIES (tried in order, first one that does not raise wins):
1. Range query: records dated within [window_start, window_end]
2. Full scan: every record of the user, filtered here to
   occurred_on >= window_start. The window end is NOT applied unless
   clip_fallback_to_window_end is set.
3. Latest records: the five most recent records regardless of date,
   so the analysis still has something to work with

If all three fail the accessor returns an empty list. It never raises.
"""

from datetime import date
from typing import Awaitable, Callable

import structlog

from ledger_insights.models.ledger import LedgerKind, LedgerRecord
from ledger_insights.services.storage import LedgerStoreInterface


logger = structlog.get_logger(__name__)

LATEST_RECORDS_LIMIT = 5

Strategy = Callable[[], Awaitable[list[LedgerRecord]]]


class LedgerAccessor:
    """Resilient multi-strategy reader over a LedgerStoreInterface."""

    def __init__(
        self,
        store: LedgerStoreInterface,
        clip_fallback_to_window_end: bool = False,
    ):
        self._store = store
        self._clip_fallback = clip_fallback_to_window_end

    def _strategies(
        self,
        user_id: str,
        window_start: date,
        window_end: date,
        kind: LedgerKind,
    ) -> list[tuple[str, Strategy]]:
        async def range_query() -> list[LedgerRecord]:
            return await self._store.query_by_user_and_range(
                user_id, kind, window_start, window_end
            )

        async def full_scan() -> list[LedgerRecord]:
            records = await self._store.query_all_by_user(user_id, kind)
            return [
                r for r in records
                if r.occurred_on is not None
                and r.occurred_on >= window_start
                and (not self._clip_fallback or r.occurred_on <= window_end)
            ]

        async def latest() -> list[LedgerRecord]:
            return await self._store.query_latest(
                user_id, kind, LATEST_RECORDS_LIMIT
            )

        return [
            ("range_query", range_query),
            ("full_scan", full_scan),
            ("latest", latest),
        ]

    async def fetch(
        self,
        user_id: str,
        window_start: date,
        window_end: date,
        kind: LedgerKind,
    ) -> list[LedgerRecord]:
        """
        Records of one kind for a user and date window.

        Returns:
            Records from the first strategy that succeeded, or an empty
            list when every strategy failed
        """
        strategies = self._strategies(user_id, window_start, window_end, kind)
        for name, strategy in strategies:
            try:
                records = await strategy()
            except Exception as e:
                logger.warning(
                    "ledger_strategy_failed",
                    strategy=name,
                    kind=kind.value,
                    user_id=user_id,
                    error=str(e),
                )
                continue
            if name != "range_query":
                logger.info(
                    "ledger_strategy_fallback",
                    strategy=name,
                    kind=kind.value,
                    user_id=user_id,
                    record_count=len(records),
                )
            return list(records)

        logger.error(
            "ledger_unavailable",
            kind=kind.value,
            user_id=user_id,
        )
        return []
