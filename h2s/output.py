"""Output renderer: progress lines, rich table formatter, JSON formatter."""

import json
import logging
import sys
from io import StringIO

from rich.console import Console
from rich.table import Table

from h2s.models import RefreshRecord, SyncReport

logger = logging.getLogger(__name__)

# User-facing lines, mirrored to the log sinks but not to stderr.
EVENT_LOGGER = "h2s.events"
events = logging.getLogger(EVENT_LOGGER)

_REPORT_COLUMNS = ["Hostname", "Address", "Table", "Set"]


def progress_line(record: RefreshRecord) -> str:
    """Return the line announcing that *record* is being applied."""
    return (
        f"Adding address '{record.address}' from hostname '{record.hostname}' "
        f"to set '{record.target.set_name}' in table '{record.target.table}'"
    )


def print_progress(record: RefreshRecord, *, file: object | None = None) -> None:
    """Print the progress line for *record* and log it for the log sinks."""
    line = progress_line(record)
    events.info(line)
    console = Console(file=file or sys.stdout, highlight=False, soft_wrap=True)
    console.print(line, markup=False)


def render(
    report: SyncReport,
    fmt: str,
    *,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Dispatch output to the appropriate formatter.

    Args:
        report: Report of the finished run.
        fmt: Output format — ``"table"`` or ``"json"``.
        file: Writable file object for output (default: ``sys.stdout``).
        width: Explicit console width (default: auto-detect).

    Raises:
        ValueError: If *fmt* is not ``"table"`` or ``"json"``.
    """
    if fmt == "table":
        render_table(report, file=file, width=width)
    elif fmt == "json":
        render_json(report, file=file)
    else:
        raise ValueError(f"Unknown output format: {fmt!r}")


# ---------------------------------------------------------------------------
# Table (rich) formatter
# ---------------------------------------------------------------------------


def render_table(
    report: SyncReport,
    *,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Render *report* as a ``rich`` table, one row per refresh.

    The title carries the number of refreshed addresses and the record type.
    """
    out = file or sys.stdout
    console = Console(file=out, highlight=False, width=width)

    table = Table(
        title=f"{len(report.refreshed)} address(es) refreshed "
        f"({report.family.record_type})"
    )
    for header in _REPORT_COLUMNS:
        table.add_column(header)

    for record in report.refreshed:
        table.add_row(
            record.hostname,
            record.address,
            str(record.target.table),
            record.target.set_name,
        )

    console.print(table)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------


def render_json(report: SyncReport, *, file: object | None = None) -> None:
    """Render *report* as JSON to *file*.

    The output is an object with ``family`` (the record type), ``table``,
    ``set`` and ``refreshed`` (a list of ``{"hostname", "address"}``
    objects).
    """
    out = file or sys.stdout
    json.dump(_report_to_dict(report), out, indent=2)
    out.write("\n")  # type: ignore[union-attr]


def _report_to_dict(report: SyncReport) -> dict:
    return {
        "family": report.family.record_type,
        "table": str(report.target.table),
        "set": report.target.set_name,
        "refreshed": [
            {"hostname": r.hostname, "address": r.address}
            for r in report.refreshed
        ],
    }


def render_to_string(report: SyncReport, fmt: str, *, width: int = 200) -> str:
    """Render to a string instead of stdout — useful for testing."""
    buf = StringIO()
    render(report, fmt, file=buf, width=width)
    return buf.getvalue()
