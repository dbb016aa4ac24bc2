"""Tests for the rclone output parser."""

import pytest

from rclone_bridge.core.parser import (
    OUTPUT_PATTERNS,
    ParsedSummary,
    parse_output,
    summarize_output
)


BISYNC_TRANSFER_OUTPUT = """\
2024/05/01 10:00:00 INFO  : Synching Path1 "/home/me/vault/" with Path2 "onedrive:vault/"
Transferred:        1.234 MiB / 1.234 MiB, 100%, 120 KiB/s, ETA 0s
Checks:                10 / 10, 100%
Transferred:            3 / 3, 100%
Elapsed time:         5.2s
"""

BISYNC_IDLE_OUTPUT = """\
2024/05/01 10:00:00 INFO  : No changes found
Transferred:              0 B / 0 B, -, 0 B/s, ETA -
Checks:                 4 / 4, 100%
Transferred:            0 / 0, -
"""


class TestFieldExtraction:
    """Each pattern is matched on its own."""

    def test_all_fields_from_stats_block(self):
        parsed = parse_output(BISYNC_TRANSFER_OUTPUT, 5.2)

        assert parsed.transferred_size == "1.234 MiB"
        assert parsed.total_size == "1.234 MiB"
        assert parsed.transferred_files == 3
        assert parsed.total_files == 3
        assert parsed.checks_done == 10
        assert parsed.checks_total == 10
        assert parsed.no_changes_marker is False

    def test_size_line_does_not_match_count_pattern(self):
        parsed = parse_output("Transferred:   2.5 GiB / 3 GiB, 80%", 1.0)

        assert parsed.transferred_size == "2.5 GiB"
        assert parsed.total_size == "3 GiB"
        assert parsed.transferred_files is None

    def test_count_without_size(self):
        parsed = parse_output("Transferred:   7 / 9, 77%", 1.0)

        assert parsed.transferred_files == 7
        assert parsed.total_files == 9
        assert parsed.transferred_size is None

    def test_case_insensitive(self):
        parsed = parse_output("TRANSFERRED: 12 KiB / 12 KiB\nchecks: 2 / 5", 0.3)

        assert parsed.transferred_size == "12 KiB"
        assert parsed.checks_done == 2
        assert parsed.checks_total == 5

    def test_pattern_table_covers_every_field(self):
        assert [name for name, _ in OUTPUT_PATTERNS] == ["size", "count", "checks", "no_changes"]


class TestSummaryDecision:
    """The first matching rule decides the summary line."""

    def test_transfer_summary(self):
        summary = summarize_output(BISYNC_TRANSFER_OUTPUT, 5.23)
        assert summary == "3 files, 1.234 MiB (5.2s, checks 10/10)"

    def test_transfer_summary_without_count_or_checks(self):
        summary = summarize_output("Transferred:  512 B / 512 B, 100%", 0.44)
        assert summary == "512 B (0.4s)"

    def test_no_changes_marker_wins(self):
        text = "nothing to do\n" + BISYNC_TRANSFER_OUTPUT
        summary = summarize_output(text, 2.0)
        assert summary == "already up to date (2.0s)"

    @pytest.mark.parametrize("marker", [
        "No changes found",
        "Everything is up-to-date",
        "already up to date",
        "UP_TO_DATE",
        "Nothing to do",
    ])
    def test_no_changes_markers(self, marker):
        assert "up to date" in summarize_output(marker, 0.5)

    def test_zero_transferred_files_means_no_changes(self):
        parsed = parse_output("Transferred:  0 / 0, -", 0.1)

        assert parsed.no_changes is True
        assert parsed.summary == "already up to date (0.1s)"

    def test_idle_run(self):
        assert summarize_output(BISYNC_IDLE_OUTPUT, 1.0) == "already up to date (1.0s)"

    def test_unrecognised_output_is_done(self):
        assert summarize_output("Bisync successful\n", 3.14) == "done (3.1s)"


class TestRobustness:
    """Parsing never raises."""

    @pytest.mark.parametrize("text", [
        "",
        None,
        "\x00\xff garbage",
        "Transferred: / , %",
        "Transferred: abc / def",
        "Checks: 1 /",
        "Transferred:" * 1000,
    ])
    def test_malformed_input(self, text):
        parsed = parse_output(text, 0.0)
        assert isinstance(parsed, ParsedSummary)
        assert parsed.summary

    def test_empty_output_is_done(self):
        parsed = parse_output("", 1.0)

        assert parsed.transferred_size is None
        assert parsed.transferred_files is None
        assert parsed.checks_done is None
        assert parsed.summary == "done (1.0s)"
