"""Node naming and node image helpers for kind clusters."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from typing import Any

API_SERVER_INTERNAL_PORT = 6443
"""Port the control plane listens on inside the node network."""


def make_node_namer(cluster_name: str) -> Callable[[str], str]:
    """Return a function naming nodes from their role and the cluster name.

    The first node of a role is ``<cluster>-<role>``; later ones get a
    numeric suffix starting at 2.
    """
    counter: Counter[str] = Counter()

    def namer(role: str) -> str:
        counter[role] += 1
        count = counter[role]
        suffix = str(count) if count > 1 else ""
        return f"{cluster_name}-{role}{suffix}"

    return namer


def required_node_images(nodes: Iterable[Any]) -> set[str]:
    """Return the set of images used by nodes (objects with an ``image``)."""
    return {node.image for node in nodes}