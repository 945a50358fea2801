"""Parsing of ``ps`` output into process records."""

import re

from pyreap.models import ColumnLayout, ProcessRecord

# [[DD-]HH:]MM:SS, with '.' also accepted before the seconds
DURATION_RE = re.compile(r"(?:(\d+)-)?(?:(\d+):)?(\d+)[:.](\d+)")


class ProcessParseError(ValueError):
    """Raised when a ``ps`` line cannot be turned into a ProcessRecord."""


def _to_int(value: str | None) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _to_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def parse_duration(text: str) -> int:
    """
    Convert a ``ps`` elapsed/cpu time string into whole seconds.

    Accepts ``DD-HH:MM:SS``, ``HH:MM:SS`` and ``MM:SS`` (or ``MM.SS``).
    Anything that does not look like a duration yields 0.
    """
    match = DURATION_RE.search(text)
    if match is None:
        return 0
    days, hours, minutes, seconds = (_to_int(group) for group in match.groups())
    return ((days * 24 + hours) * 60 + minutes) * 60 + seconds


def parse_process_line(line: str, layout: ColumnLayout) -> ProcessRecord:
    """
    Parse one line of ``ps`` output laid out as ``layout.columns``.

    The command may contain spaces, so it is rebuilt from every field
    from its column onward. Numeric columns that fail to convert are
    recorded as zero.

    Raises:
        ProcessParseError: If the line has fewer fields than the layout needs.
    """
    fields = line.split()
    if len(fields) < layout.min_fields:
        raise ProcessParseError(
            f"expected at least {layout.min_fields} fields, got {len(fields)}: {line!r}"
        )

    if layout.threads_known:
        thread_count = _to_int(fields[6])
        state, etime, cputime = fields[7:10]
    else:
        thread_count = 1
        state, etime, cputime = fields[6:9]

    return ProcessRecord(
        command=" ".join(fields[layout.command_index :]),
        owner=fields[0],
        parent_id=fields[1],
        process_id=fields[2],
        virtual_size_kb=_to_int(fields[3]),
        resident_size_kb=_to_int(fields[4]),
        cpu_percent=_to_float(fields[5]),
        thread_count=thread_count,
        state=state,
        elapsed_seconds=parse_duration(etime),
        cpu_time_seconds=parse_duration(cputime),
    )


def parse_process_table(output: str, layout: ColumnLayout) -> list[ProcessRecord]:
    """Parse full ``ps`` output, dropping the header and any unparsable line."""
    records: list[ProcessRecord] = []
    for line in output.split("\n")[1:]:
        try:
            records.append(parse_process_line(line, layout))
        except ProcessParseError:
            continue
    return records
