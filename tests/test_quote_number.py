"""
Tests for QuoteNumberService and the counter stores.
"""

import json
from datetime import date, datetime

import pytest

from app.exceptions import CounterStoreError
from app.repository.counter_repository import InMemoryCounterStore, JsonFileCounterStore
from app.services.quote_number_service import (
    QuoteNumberService,
    counter_key,
    format_quote_number,
)


@pytest.fixture
def numbers():
    return QuoteNumberService(InMemoryCounterStore())


class TestQuoteNumbers:
    def test_sequential_within_a_day(self, numbers):
        assert numbers.next_number("2026-10-19") == "Q-20261019-001"
        assert numbers.next_number("2026-10-19") == "Q-20261019-002"

    def test_counter_resets_per_day(self, numbers):
        numbers.next_number("2026-10-19")
        assert numbers.next_number("2026-10-20") == "Q-20261020-001"

    def test_date_and_datetime_inputs(self, numbers):
        assert numbers.next_number(date(2026, 1, 5)) == "Q-20260105-001"
        assert numbers.next_number(datetime(2026, 1, 5, 17, 30)) == "Q-20260105-002"
        assert numbers.next_number("2026-01-05T09:00:00") == "Q-20260105-003"

    def test_defaults_to_today(self, numbers):
        today = date.today().strftime("%Y%m%d")
        assert numbers.next_number() == f"Q-{today}-001"

    def test_invalid_date_raises(self, numbers):
        with pytest.raises(ValueError):
            numbers.next_number("19/10/2026")

    def test_padding_grows_past_999(self):
        assert format_quote_number(date(2026, 10, 19), 7) == "Q-20261019-007"
        assert format_quote_number(date(2026, 10, 19), 1000) == "Q-20261019-1000"

    def test_counter_key(self):
        assert counter_key(date(2026, 10, 19)) == "quote_counter_2026-10-19"


class TestJsonFileCounterStore:
    def test_counters_survive_a_new_store(self, tmp_path):
        path = tmp_path / "counters.json"
        QuoteNumberService(JsonFileCounterStore(path)).next_number("2026-10-19")
        again = QuoteNumberService(JsonFileCounterStore(path))
        assert again.next_number("2026-10-19") == "Q-20261019-002"
        assert json.loads(path.read_text()) == {"quote_counter_2026-10-19": 2}

    def test_peek_does_not_increment(self, tmp_path):
        store = JsonFileCounterStore(tmp_path / "c.json")
        store.increment("k")
        assert store.peek("k") == 1
        assert store.peek("missing") == 0

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "counters.json"
        path.write_text("{not json")
        with pytest.raises(CounterStoreError):
            JsonFileCounterStore(path).increment("quote_counter_2026-10-19")
        assert path.read_text() == "{not json"

    def test_in_memory_store(self):
        store = InMemoryCounterStore()
        assert [store.increment("a") for _ in range(3)] == [1, 2, 3]
        assert store.peek("a") == 3
        assert store.peek("b") == 0

    @pytest.mark.parametrize("content", [
        '{"quote_counter_2026-10-19": "x"}',
        '{"quote_counter_2026-10-19": -1}',
        '{"quote_counter_2026-10-19": 2.5}',
        '[1, 2]',
    ])
    def test_invalid_contents_raise(self, tmp_path, content):
        path = tmp_path / "counters.json"
        path.write_text(content)
        with pytest.raises(CounterStoreError):
            QuoteNumberService(JsonFileCounterStore(path)).next_number("2026-10-19")
        assert path.read_text() == content

    def test_failed_write_leaves_no_temp_file(self, tmp_path, monkeypatch):
        path = tmp_path / "counters.json"
        store = JsonFileCounterStore(path)

        def fail(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr("app.repository.counter_repository.os.replace", fail)
        with pytest.raises(CounterStoreError):
            store.increment("quote_counter_2026-10-19")
        assert list(tmp_path.iterdir()) == []
