"""
Tests for MarketLens model helpers
"""

import pytest
from datetime import datetime, timedelta, timezone

from marketlens.database.models import FixedPoint, Query, to_naive_utc, new_id


class TestFixedPoint:
    """Fixed-point decimal column type"""

    def test_quantizes_half_up(self):
        column = FixedPoint(12, 2)

        assert column.process_bind_param(19.999, None) == "20.00"
        assert column.process_bind_param(0.125, None) == "0.13"
        assert column.process_bind_param(7, None) == "7.00"

    def test_reads_back_as_float(self):
        column = FixedPoint(10, 2)

        value = column.process_result_value("42.75", None)

        assert value == 42.75
        assert isinstance(value, float)

    def test_none_passes_through(self):
        column = FixedPoint(3, 2)

        assert column.process_bind_param(None, None) is None
        assert column.process_result_value(None, None) is None

    def test_overflow_raises(self):
        column = FixedPoint(3, 2)

        assert column.process_bind_param(9.99, None) == "9.99"
        with pytest.raises(ValueError):
            column.process_bind_param(10, None)


class TestSentimentSummary:
    """Query.sentiment_summary"""

    def test_none_when_no_counts(self):
        query = Query(sentiment_positive=None, sentiment_neutral=None, sentiment_negative=None)

        assert query.sentiment_summary is None

    def test_missing_counts_become_zero(self):
        query = Query(sentiment_positive=3, sentiment_neutral=None, sentiment_negative=1)

        assert query.sentiment_summary == {"positive": 3, "neutral": 0, "negative": 1}


class TestHelpers:

    def test_to_naive_utc_converts_aware(self):
        aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert to_naive_utc(aware) == datetime(2024, 1, 1, 17, 0)

    def test_to_naive_utc_keeps_naive(self):
        naive = datetime(2024, 1, 1, 12, 0)

        assert to_naive_utc(naive) is naive

    def test_new_id_is_unique(self):
        assert new_id() != new_id()
        assert len(new_id()) == 36
