"""Proxy environment handling for cluster nodes."""

from __future__ import annotations

import os
from collections.abc import Callable

HTTP_PROXY = "HTTP_PROXY"
HTTPS_PROXY = "HTTPS_PROXY"
NO_PROXY = "NO_PROXY"


def _os_get_env(key: str) -> str:
    return os.environ.get(key, "")


def get_proxy_envs(
    service_subnet: str,
    pod_subnet: str,
    get_env: Callable[[str], str | None] | None = None,
) -> dict[str, str]:
    """Return proxy variables (upper and lower case) to pass to nodes.

    When any proxy is set, NO_PROXY is extended with the cluster subnets.
    """
    lookup = get_env or _os_get_env
    envs: dict[str, str] = {}
    for name in (HTTP_PROXY, HTTPS_PROXY, NO_PROXY):
        value = lookup(name) or lookup(name.lower()) or ""
        if value:
            envs[name] = value
            envs[name.lower()] = value

    if envs:
        no_proxy = envs.get(NO_PROXY, "")
        if no_proxy:
            no_proxy += ","
        no_proxy += f"{service_subnet},{pod_subnet}"
        envs[NO_PROXY] = no_proxy
        envs[NO_PROXY.lower()] = no_proxy
    return envs