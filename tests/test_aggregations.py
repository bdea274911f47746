"""Tests for aggregation functions."""

import pytest

from logshark.aggregations import (
    by_client_address,
    by_path,
    by_status,
    by_user_agent,
    field_key,
    group_count,
    rank_counts,
    threshold_filtered_group_count,
    time_bucketed_count,
    top_n,
    total_count,
)
from logshark.ast import StatusSet
from logshark.errors import InvalidArgument
from tests.helpers import make_record

SUSPICIOUS = StatusSet({404, 500})


class TestTotalCount:
    def test_counts_records(self, records):
        assert total_count(records).rows == ((18,),)

    def test_empty(self):
        result = total_count([])
        assert result.rows == ((0,),)
        assert result.arity == 1

    def test_matches_partition_counts(self, store):
        assert total_count(store.full_scan()).rows[0][0] == sum(store.partition_counts().values())


class TestGroupCount:
    def test_by_status(self, records):
        assert group_count(records, by_status).rows == (
            (404, 7),
            (500, 5),
            (200, 4),
            (304, 1),
            (403, 1),
        )

    def test_by_user_agent_includes_empty(self, records):
        assert group_count(records, by_user_agent).rows == (
            ("Mozilla/5.0", 7),
            ("curl/8.0", 6),
            ("python-requests/2.31", 4),
            ("", 1),
        )

    def test_ties_broken_by_ascending_key(self):
        recs = [make_record(path=p) for p in ["/b", "/a", "/c", "/a", "/b"]]
        assert group_count(recs, by_path).rows == (("/a", 2), ("/b", 2), ("/c", 1))

    def test_empty(self):
        result = group_count([], by_path)
        assert result.rows == ()
        assert result.arity == 2

    def test_accepts_generators(self, store):
        assert group_count(store.full_scan(), by_status).as_dict()[404] == 7


class TestTopN:
    def test_top_pages(self, records):
        assert top_n(records, by_path, 3).rows == (
            ("/index.html", 5),
            ("/xmlrpc.php", 3),
            ("/admin", 2),
        )

    @pytest.mark.parametrize("n", [1, 2, 5, 100])
    def test_is_prefix_of_group_count(self, records, n):
        full = group_count(records, by_path).rows
        result = top_n(records, by_path, n).rows
        assert len(result) <= n
        assert result == full[: len(result)]

    @pytest.mark.parametrize("n", [0, -1, True, 2.5])
    def test_invalid_n(self, records, n):
        with pytest.raises(InvalidArgument):
            top_n(records, by_path, n)

    def test_empty(self):
        assert top_n([], by_path, 3).rows == ()


class TestThresholdFilteredGroupCount:
    def test_suspicious_ips(self, records):
        result = threshold_filtered_group_count(records, by_client_address, SUSPICIOUS, 3)
        assert result.rows == (("192.168.1.22", 5), ("192.168.1.12", 4))

    def test_count_equal_to_threshold_is_excluded(self, records):
        result = threshold_filtered_group_count(records, by_client_address, SUSPICIOUS, 3)
        assert "192.168.1.30" not in result.as_dict()

    @pytest.mark.parametrize("min_count", [0, 1, 2, 3, 4, 5])
    def test_never_emits_group_at_or_below_threshold(self, records, min_count):
        result = threshold_filtered_group_count(records, by_client_address, SUSPICIOUS, min_count)
        assert all(count > min_count for _, count in result.rows)

    def test_pruned_scan_gives_same_rows_as_full_scan(self, store):
        pruned = threshold_filtered_group_count(
            store.scan(SUSPICIOUS), by_client_address, SUSPICIOUS, 2
        )
        full = threshold_filtered_group_count(
            store.full_scan(), by_client_address, SUSPICIOUS, 2
        )
        assert pruned.rows == full.rows

    def test_accepts_plain_callable(self, records):
        result = threshold_filtered_group_count(
            records, by_client_address, lambda code: code >= 500, 1
        )
        assert result.rows == (("192.168.1.12", 2), ("192.168.1.22", 2))

    def test_negative_min_count(self, records):
        with pytest.raises(InvalidArgument):
            threshold_filtered_group_count(records, by_client_address, SUSPICIOUS, -1)

    def test_empty(self):
        assert threshold_filtered_group_count([], by_client_address, SUSPICIOUS, 3).rows == ()


class TestTimeBucketedCount:
    def test_minute_buckets(self, records):
        assert time_bucketed_count(records, 16).rows == (
            ("2024-03-01 10:00", 7),
            ("2024-03-01 10:01", 5),
            ("2024-03-01 10:02", 6),
        )

    def test_hour_buckets(self, records):
        assert time_bucketed_count(records, 13).rows == (("2024-03-01 10", 18),)

    def test_chronological_even_when_input_is_not(self):
        recs = [
            make_record(timestamp="2024-03-02 00:00:00"),
            make_record(timestamp="2023-12-31 23:59:59"),
            make_record(timestamp="2024-03-01 12:00:00"),
        ]
        buckets = [bucket for bucket, _ in time_bucketed_count(recs, 10).rows]
        assert buckets == ["2023-12-31", "2024-03-01", "2024-03-02"]
        assert buckets == sorted(buckets)

    @pytest.mark.parametrize("precision", [0, 20, -3])
    def test_invalid_precision(self, records, precision):
        with pytest.raises(InvalidArgument):
            time_bucketed_count(records, precision)

    def test_empty(self):
        assert time_bucketed_count([], 16).rows == ()


class TestHelpers:
    def test_field_key(self):
        record = make_record(404, client_address="1.2.3.4")
        assert field_key("status_code")(record) == 404
        assert field_key("client_address")(record) == "1.2.3.4"

    def test_unknown_field(self):
        with pytest.raises(InvalidArgument, match="Unknown record field"):
            field_key("referrer")

    def test_rank_counts(self):
        from collections import Counter

        assert rank_counts(Counter({"b": 1, "a": 1, "c": 3})) == [("c", 3), ("a", 1), ("b", 1)]

    def test_as_dict_requires_two_columns(self, records):
        with pytest.raises(ValueError):
            total_count(records).as_dict()
