"""Summarise rclone output.

The patterns target the stats block that ``rclone bisync --verbose`` prints
when it finishes (rclone 1.6x series), for example::

    Transferred:        1.234 MiB / 1.234 MiB, 100%, 0 B/s, ETA -
    Checks:                10 / 10, 100%
    Transferred:            3 / 3, 100%

Every pattern is tried independently against the whole text. Output that
matches none of them is still a successful run and is summarised as "done".
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


SIZE_PAIR = re.compile(r"Transferred:\s*([\d.]+\s*\w*i?B)\s*/\s*([\d.]+\s*\w*i?B)", re.IGNORECASE)
COUNT_PAIR = re.compile(r"Transferred:\s*(\d+)\s*/\s*(\d+)", re.IGNORECASE)
CHECKS_PAIR = re.compile(r"Checks:\s*(\d+)\s*/\s*(\d+)", re.IGNORECASE)
NO_CHANGES = re.compile(r"No changes|up.to.date|Nothing to do", re.IGNORECASE)

# (field, pattern) table; fields are extracted independently of each other
OUTPUT_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("size", SIZE_PAIR),
    ("count", COUNT_PAIR),
    ("checks", CHECKS_PAIR),
    ("no_changes", NO_CHANGES),
)


@dataclass(frozen=True)
class ParsedSummary:
    """Fields extracted from one rclone run plus the decided summary line."""

    elapsed_seconds: float
    transferred_size: Optional[str] = None
    total_size: Optional[str] = None
    transferred_files: Optional[int] = None
    total_files: Optional[int] = None
    checks_done: Optional[int] = None
    checks_total: Optional[int] = None
    no_changes_marker: bool = False

    @property
    def no_changes(self) -> bool:
        return self.no_changes_marker or self.transferred_files == 0

    @property
    def has_checks(self) -> bool:
        return self.checks_done is not None and self.checks_total is not None

    @property
    def summary(self) -> str:
        elapsed = f"{self.elapsed_seconds:.1f}s"

        if self.no_changes:
            return f"already up to date ({elapsed})"

        if self.transferred_size:
            files_part = f"{self.transferred_files} files, " if self.transferred_files is not None else ""
            checks_part = f", checks {self.checks_done}/{self.checks_total}" if self.has_checks else ""
            return f"{files_part}{self.transferred_size} ({elapsed}{checks_part})"

        return f"done ({elapsed})"


def _match_all(text: str) -> Dict[str, "re.Match[str]"]:
    matches = {}
    for field_name, pattern in OUTPUT_PATTERNS:
        match = pattern.search(text)
        if match:
            matches[field_name] = match
    return matches


def parse_output(combined_output: Optional[str], elapsed_seconds: float) -> ParsedSummary:
    """Parse the combined stdout/stderr text of one rclone run.

    Args:
        combined_output: stdout followed by stderr, in any interleaving
        elapsed_seconds: Wall-clock duration of the run

    Returns:
        ParsedSummary; fields that could not be found are left as None
    """
    matches = _match_all(combined_output or "")

    size = matches.get("size")
    count = matches.get("count")
    checks = matches.get("checks")

    return ParsedSummary(
        elapsed_seconds=elapsed_seconds,
        transferred_size=size.group(1) if size else None,
        total_size=size.group(2) if size else None,
        transferred_files=int(count.group(1)) if count else None,
        total_files=int(count.group(2)) if count else None,
        checks_done=int(checks.group(1)) if checks else None,
        checks_total=int(checks.group(2)) if checks else None,
        no_changes_marker="no_changes" in matches,
    )


def summarize_output(combined_output: Optional[str], elapsed_seconds: float) -> str:
    """Shortcut returning only the summary line."""
    return parse_output(combined_output, elapsed_seconds).summary
