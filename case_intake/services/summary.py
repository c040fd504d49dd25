from __future__ import annotations

from ..models.import_result import ImportResult
from ..models.validation import ParseReport

"""SUMMARY line rendering.

Format:
SUMMARY rows={rows} accepted={accepted} rejected={rejected} skipped={skipped}
imported={imported} failed={failed} team={team} unmatched={unmatched}
elapsed_sec={elapsed}

For parse-only runs (--dry-run) imported/failed/unmatched are 0.
"""

__all__ = [
    "format_elapsed",
    "render_summary_line",
]


def format_elapsed(seconds: float) -> str:
    """Integral values without decimals, tiny values without scientific notation."""
    if seconds <= 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(
    report: ParseReport,
    result: ImportResult | None,
    elapsed_seconds: float,
) -> str:
    """Render the single SUMMARY line for a run.

    >>> from case_intake.models import ParseReport
    >>> render_summary_line(ParseReport([], [], [], 0, 0), None, 2.0)
    'SUMMARY rows=0 accepted=0 rejected=0 skipped=0 imported=0 failed=0 team=0 unmatched=0 elapsed_sec=2'
    """
    imported = result.success if result is not None else 0
    failed = result.failed if result is not None else 0
    unmatched = len(result.unmatched_names) if result is not None else 0
    return (
        f"SUMMARY rows={report.total_rows} "
        f"accepted={report.accepted_count} "
        f"rejected={report.rejected_count} "
        f"skipped={report.skipped_rows} "
        f"imported={imported} "
        f"failed={failed} "
        f"team={len(report.team_members)} "
        f"unmatched={unmatched} "
        f"elapsed_sec={format_elapsed(elapsed_seconds)}"
    )
