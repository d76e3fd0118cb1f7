"""
Tests for the slow query log parser.
"""
import pytest

from core.log_parser import parse_slow_log


class TestParseSlowLog:
    """Tests for parse_slow_log."""

    def test_single_entry(self):
        content = (
            "# Time: 2024-01-01T10:00:00.000000Z\n"
            "# User@Host: app[app] @ [10.0.0.1]  Id: 5\n"
            "# Query_time: 1.500000  Lock_time: 0.000100  Rows_sent: 1  Rows_examined: 100\n"
            "SET timestamp=1704103200;\n"
            "SELECT * FROM users WHERE id = 42;\n"
        )
        entries = parse_slow_log(content)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.time == "2024-01-01T10:00:00.000000Z"
        assert entry.user == "app"
        assert entry.host == "10.0.0.1"
        assert entry.connection_id == "5"
        assert entry.query_time == 1.5
        assert entry.lock_time == pytest.approx(0.0001)
        assert entry.rows_sent == 1
        assert entry.rows_examined == 100
        assert entry.query == "SELECT * FROM users WHERE id = 42;"
        assert entry.database is None

    def test_sample_log(self, sample_log):
        entries = parse_slow_log(sample_log)

        assert len(entries) == 3
        assert [e.connection_id for e in entries] == ["5", "6", "7"]
        assert entries[2].query == "SELECT name, total FROM orders WHERE status = 'paid';"
        assert entries[2].user == "report"

    def test_header_only_returns_empty(self, header_only_log):
        assert parse_slow_log(header_only_log) == []

    def test_empty_and_garbage_input(self):
        assert parse_slow_log("") == []
        assert parse_slow_log("not a slow log\nat all") == []

    def test_entry_without_sql_is_dropped(self):
        content = (
            "# Time: 2024-01-01T10:00:00Z\n"
            "# Time: 2024-01-01T11:00:00Z\n"
            "# User@Host: app[app] @ [10.0.0.1]  Id: 5\n"
            "SELECT 1;\n"
        )
        entries = parse_slow_log(content)

        assert len(entries) == 1
        assert entries[0].time == "2024-01-01T11:00:00Z"

    def test_trailing_entry_without_sql_is_dropped(self):
        content = (
            "# Time: 2024-01-01T10:00:00Z\n"
            "SELECT 1;\n"
            "# Time: 2024-01-01T11:00:00Z\n"
            "# Query_time: 1.0  Lock_time: 0.0  Rows_sent: 0  Rows_examined: 0\n"
        )
        entries = parse_slow_log(content)

        assert len(entries) == 1
        assert entries[0].query == "SELECT 1;"

    def test_sql_before_first_time_line_is_ignored(self):
        content = (
            "SELECT orphan;\n"
            "# Time: 2024-01-01T10:00:00Z\n"
            "SELECT 1;\n"
        )
        entries = parse_slow_log(content)

        assert len(entries) == 1
        assert entries[0].query == "SELECT 1;"

    def test_time_line_without_value_never_emits(self):
        content = "# Time:\nSELECT 1;\n"
        assert parse_slow_log(content) == []

    def test_malformed_metadata_leaves_fields_unset(self):
        content = (
            "# Time: 2024-01-01T10:00:00Z\n"
            "# User@Host: root[root] @ localhost []  Id: 3\n"
            "# Query_time: slow  Lock_time: none\n"
            "SELECT 1;\n"
        )
        entries = parse_slow_log(content)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.user is None
        assert entry.host is None
        assert entry.connection_id is None
        assert entry.query_time is None
        assert entry.rows_examined is None

    def test_numeric_prefix_is_used(self):
        content = (
            "# Time: 2024-01-01T10:00:00Z\n"
            "# Query_time: 1.5.2  Lock_time: 0.1  Rows_sent: 1  Rows_examined: 2\n"
            "SELECT 1;\n"
        )
        entry = parse_slow_log(content)[0]

        assert entry.query_time == 1.5
        assert entry.lock_time == 0.1

    def test_database_carries_across_entries(self):
        content = (
            "# Time: t1\n"
            "SELECT 1;\n"
            "# Time: t2\n"
            "use shop;\n"
            "SELECT 2;\n"
            "# Time: t3\n"
            "SELECT 3;\n"
            "# Time: t4\n"
            "use billing;\n"
            "SELECT 4;\n"
        )
        entries = parse_slow_log(content)

        assert [e.database for e in entries] == [None, "shop", "shop", "billing"]

    def test_database_does_not_leak_between_calls(self):
        parse_slow_log("# Time: t1\nuse shop;\nSELECT 1;\n")
        entries = parse_slow_log("# Time: t2\nSELECT 2;\n")

        assert entries[0].database is None

    def test_multiline_query_is_joined_and_trimmed(self):
        content = (
            "# Time: t1\n"
            "   SELECT a,\n"
            "\tb\n"
            "FROM t;   \n"
        )
        entry = parse_slow_log(content)[0]

        assert entry.query == "SELECT a, b FROM t;"

    def test_other_comment_lines_are_ignored(self):
        content = (
            "# Time: t1\n"
            "# Thread_id: 12  Schema: shop  QC_hit: No\n"
            "# Rows_affected: 0  Bytes_sent: 56\n"
            "SELECT 1;\n"
        )
        entry = parse_slow_log(content)[0]

        assert entry.query == "SELECT 1;"

    def test_crlf_line_endings(self, sample_log):
        entries = parse_slow_log(sample_log.replace("\n", "\r\n"))

        assert len(entries) == 3
        assert entries[0].query == "SELECT * FROM users WHERE id = 42;"

    def test_leading_bom_is_ignored(self, sample_log):
        entries = parse_slow_log("\ufeff" + sample_log)

        assert len(entries) == 3
        assert entries[0].time == "2024-01-01T10:00:00.000000Z"

    def test_bom_before_first_time_line(self):
        content = "\ufeff# Time: t1\nSELECT 1;\n"

        assert [e.time for e in parse_slow_log(content)] == ["t1"]

    def test_non_ascii_digits_leave_fields_unset(self):
        content = (
            "# Time: t1\n"
            "# User@Host: app[app] @ [10.0.0.1]  Id: ٥\n"
            "# Query_time: 1.0  Lock_time: 0.0  Rows_sent: 1  Rows_examined: ١٠٠\n"
            "SELECT 1;\n"
        )
        entry = parse_slow_log(content)[0]

        assert entry.connection_id is None
        assert entry.rows_examined is None
        assert entry.query_time is None

    def test_entries_are_immutable(self, sample_log):
        entry = parse_slow_log(sample_log)[0]

        with pytest.raises(AttributeError):
            entry.query_time = 0.0
