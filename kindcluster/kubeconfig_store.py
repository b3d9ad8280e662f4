"""Writing, merging and removing kind entries in KUBECONFIG files."""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Callable, TypeVar

from kindcluster.kubeconfig import (
    Config,
    KubeconfigError,
    check_kubeadm_expectations,
    encode,
    kind_cluster_key,
    read,
)
from kindcluster.kubeconfig_paths import lock_file, path_for_merge, paths, unlock_file

_Entry = TypeVar("_Entry")


def _get_env(key: str) -> str:
    return os.environ.get(key, "")


@contextmanager
def _config_lock(config_path: str) -> Iterator[None]:
    """Lock config_path like client-go does, releasing it on exit."""
    try:
        lock_file(config_path)
    except OSError as err:
        raise KubeconfigError(f"failed to lock config file: {err}") from err
    try:
        yield
    finally:
        try:
            unlock_file(config_path)
        except OSError:
            pass


def write(cfg: Config, config_path: str) -> None:
    """Encode cfg and write it to config_path, creating directories as needed."""
    encoded = encode(cfg)
    directory = os.path.dirname(config_path)
    if directory and not os.path.exists(directory):
        try:
            os.makedirs(directory, 0o755, exist_ok=True)
        except OSError as err:
            raise KubeconfigError(
                f"failed to create directory for KUBECONFIG: {err}"
            ) from err
    try:
        fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(encoded)
    except OSError as err:
        raise KubeconfigError(f"failed to write KUBECONFIG: {err}") from err


def _upsert(
    entries: list[_Entry], new: _Entry, name_of: Callable[[_Entry], str]
) -> list[_Entry]:
    """Replace every entry named like new, or append new if none match."""
    name = name_of(new)
    if any(name_of(entry) == name for entry in entries):
        return [new if name_of(entry) == name else entry for entry in entries]
    return [*entries, new]


def merge(existing: Config, kind: Config) -> None:
    """Merge the kind config into existing, in place."""
    check_kubeadm_expectations(kind)

    existing.clusters = _upsert(existing.clusters, kind.clusters[0], lambda e: e.name)
    existing.users = _upsert(existing.users, kind.users[0], lambda e: e.name)
    existing.contexts = _upsert(existing.contexts, kind.contexts[0], lambda e: e.name)

    existing.current_context = kind.current_context

    # Some clients depend on apiVersion and kind being present.
    if not existing.other_fields:
        existing.other_fields = kind.other_fields


def write_merged(kind_config: Config, explicit_config_path: str) -> None:
    """Merge kind_config into the kubeconfig kubectl would use and write it back."""
    config_path = path_for_merge(explicit_config_path, _get_env)
    with _config_lock(config_path):
        try:
            existing = read(config_path)
        except KubeconfigError as err:
            raise KubeconfigError(f"failed to get kubeconfig to merge: {err}") from err
        merge(existing, kind_config)
        write(existing, config_path)


def remove(cfg: Config, kind_cluster_name: str) -> bool:
    """Drop the kind cluster's entries from cfg; return True if anything changed."""
    key = kind_cluster_key(kind_cluster_name)

    clusters = [c for c in cfg.clusters if c.name != key]
    users = [u for u in cfg.users if u.name != key]
    contexts = [c for c in cfg.contexts if c.name != key]
    mutated = (
        len(clusters) != len(cfg.clusters)
        or len(users) != len(cfg.users)
        or len(contexts) != len(cfg.contexts)
    )
    cfg.clusters, cfg.users, cfg.contexts = clusters, users, contexts

    if cfg.current_context == key:
        cfg.current_context = ""
        mutated = True

    return mutated


def remove_kind(kind_cluster_name: str, explicit_path: str) -> None:
    """Remove the kind cluster from every kubeconfig file kubectl would consider."""
    for config_path in paths(explicit_path, _get_env):
        with _config_lock(config_path):
            try:
                existing = read(config_path)
            except KubeconfigError as err:
                raise KubeconfigError(
                    f"failed to read kubeconfig to remove KIND entry: {err}"
                ) from err
            if remove(existing, kind_cluster_name):
                write(existing, config_path)