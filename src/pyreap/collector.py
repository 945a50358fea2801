"""Process table snapshots taken through ``ps``."""

import logging
import subprocess

from pyreap.models import ColumnLayout, ProcessRecord
from pyreap.parsing import parse_process_table

logger = logging.getLogger(__name__)

PS_COMMAND = "ps"


def collect_processes(layout: ColumnLayout) -> list[ProcessRecord]:
    """
    Take a snapshot of every process on the system.

    Runs ``ps axwwo <columns>`` with the columns of the given layout and
    parses its output. A poll that cannot run ``ps`` at all is reported as
    an empty snapshot; the next poll simply tries again.
    """
    try:
        result = subprocess.run(
            [PS_COMMAND, "axwwo", layout.ps_format],
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError:
        logger.debug("Could not run %s", PS_COMMAND, exc_info=True)
        return []

    if result.returncode != 0:
        # Partial output is still usable
        logger.debug(
            "%s exited with status %d: %s", PS_COMMAND, result.returncode, result.stderr.strip()
        )

    return parse_process_table(result.stdout, layout)
