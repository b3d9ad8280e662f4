"""Waiting for a node's logs to show that cgroups are ready."""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable


class LogMatchError(Exception):
    """Raised when no log line matches or the logs could not be read."""


@functools.cache
def node_reached_cgroups_ready_regexp() -> re.Pattern[str]:
    """Return the pattern marking a node whose cgroups are ready.

    It matches the cgroup v1 entrypoint message or systemd reaching the
    multi-user target under cgroup v2.
    """
    return re.compile("Reached target .*Multi-User System.*|detected cgroup v1")


def wait_until_log_regexp_matches(
    lines: Iterable[str], pattern: re.Pattern[str] | str
) -> None:
    """Consume log lines until one matches pattern.

    Stops reading at the first match. Raises LogMatchError if the lines end
    without a match, or if reading them fails.
    """
    regexp = re.compile(pattern) if isinstance(pattern, str) else pattern
    try:
        for line in lines:
            if regexp.search(line.rstrip("\r\n")):
                return
    except OSError as err:
        raise LogMatchError(f"failed to read logs: {err}") from err
    raise LogMatchError(
        f"could not find a log line that matches {regexp.pattern!r}"
    )