"""Locating KUBECONFIG files and locking them the way kubectl does."""

from __future__ import annotations

import os
import posixpath
import stat
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager

KUBECONFIG_ENV = "KUBECONFIG"

GetEnv = Callable[[str], str]


def discard_empty_and_duplicates(paths: Iterable[str]) -> list[str]:
    """Drop empty entries and later duplicates, keeping order."""
    return list(dict.fromkeys(p for p in paths if p))


def _split_list(value: str) -> list[str]:
    if not value:
        return []
    return value.split(os.pathsep)


def home_dir(goos: str, get_env: GetEnv) -> str:
    """Return the current user's home directory, with kubectl's Windows rules."""
    if goos != "windows":
        return get_env("HOME")

    home = get_env("HOME")
    home_drive, home_path = get_env("HOMEDRIVE"), get_env("HOMEPATH")
    home_drive_home_path = home_drive + home_path if home_drive and home_path else ""
    user_profile = get_env("USERPROFILE")

    for candidate in (home, home_drive_home_path, user_profile):
        if candidate and os.path.exists(os.path.join(candidate, ".kube", "config")):
            return candidate

    first_set = ""
    first_existing = ""
    for candidate in (home, user_profile, home_drive_home_path):
        if not candidate:
            continue
        first_set = first_set or candidate
        try:
            info = os.stat(candidate)
        except OSError:
            continue
        first_existing = first_existing or candidate
        if stat.S_ISDIR(info.st_mode) and stat.S_IMODE(info.st_mode) & 0o200:
            return candidate

    return first_existing or first_set


def paths(explicit_path: str, get_env: GetEnv) -> list[str]:
    """Return the kubeconfig paths to consider, following kubectl's rules."""
    if explicit_path:
        return [explicit_path]
    found = discard_empty_and_duplicates(_split_list(get_env(KUBECONFIG_ENV)))
    if found:
        return found
    from_home = posixpath.join(home_dir(os.name == "nt" and "windows" or "", get_env), ".kube", "config")
    return [posixpath.normpath(from_home)]


def file_exists(filename: str) -> bool:
    """Return True if filename exists and is not a directory."""
    try:
        info = os.stat(filename)
    except OSError:
        return False
    return not stat.S_ISDIR(info.st_mode)


def path_for_merge(explicit_path: str, get_env: GetEnv) -> str:
    """Return the file kubectl would merge into."""
    candidates = paths(explicit_path, get_env)
    if len(candidates) == 1:
        return candidates[0]
    return next((p for p in candidates if file_exists(p)), candidates[-1])


def lock_name(filename: str) -> str:
    """Return the lock file name for filename."""
    return filename + ".lock"


def lock_file(filename: str) -> None:
    """Create the lock file for filename, creating its directory if needed.

    Raises FileExistsError if the lock is already held.
    """
    directory = os.path.dirname(filename) or "."
    if not os.path.exists(directory):
        os.makedirs(directory, 0o755, exist_ok=True)
    fd = os.open(lock_name(filename), os.O_RDONLY | os.O_CREAT | os.O_EXCL, 0)
    os.close(fd)


def unlock_file(filename: str) -> None:
    """Remove the lock file for filename."""
    os.remove(lock_name(filename))


@contextmanager
def locked(filename: str) -> Iterator[None]:
    """Hold the lock for filename for the duration of the block."""
    lock_file(filename)
    try:
        yield
    finally:
        try:
            unlock_file(filename)
        except OSError:
            pass