"""
Quote Number Service – assigns ``Q-YYYYMMDD-NNN`` quote numbers.

NNN is a per-day counter, zero-padded to three digits, kept in an
injected counter store. Numbers are handed out before a quotation is
built; the layout engine only ever reads them.
"""

from __future__ import annotations

import logging
from datetime import date as date_type, datetime
from typing import Protocol

logger = logging.getLogger(__name__)


class CounterStore(Protocol):
    def increment(self, key: str) -> int: ...


def counter_key(day: date_type) -> str:
    return f"quote_counter_{day.isoformat()}"


def format_quote_number(day: date_type, counter: int) -> str:
    return f"Q-{day.strftime('%Y%m%d')}-{counter:03d}"


class QuoteNumberService:
    """Hands out monotonically increasing quote numbers per calendar day."""

    def __init__(self, store: CounterStore):
        self._store = store

    def next_number(self, day: date_type | str | None = None) -> str:
        """
        Parameters
        ----------
        day : date, ISO-8601 string or None
            The quotation date; today when omitted.

        Raises ``ValueError`` for a string that is not an ISO date.
        """
        if day is None:
            day = date_type.today()
        elif isinstance(day, str):
            day = date_type.fromisoformat(day.strip()[:10])
        elif isinstance(day, datetime):
            day = day.date()

        counter = self._store.increment(counter_key(day))
        number = format_quote_number(day, counter)
        logger.info("Assigned quote number %s", number)
        return number
