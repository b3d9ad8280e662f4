"""KUBECONFIG data model, encoding and decoding for kind clusters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml


class KubeconfigError(Exception):
    """Raised when a KUBECONFIG cannot be read, decoded, encoded or validated."""


@dataclass
class Cluster:
    """How to communicate with a kubernetes cluster."""

    server: str = ""
    other_fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class NamedCluster:
    """A cluster entry with its nickname."""

    name: str = ""
    cluster: Cluster = field(default_factory=Cluster)


@dataclass
class NamedUser:
    """A user entry with its nickname; the user data is kept untouched."""

    name: str = ""
    user: dict[str, Any] | None = None


@dataclass
class Context:
    """References to a cluster and a user, plus any other context fields."""

    cluster: str = ""
    user: str = ""
    other_fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class NamedContext:
    """A context entry with its nickname."""

    name: str = ""
    context: Context = field(default_factory=Context)


@dataclass
class Config:
    """A KUBECONFIG with the fields kind inspects; the rest is kept in other_fields."""

    clusters: list[NamedCluster] = field(default_factory=list)
    users: list[NamedUser] = field(default_factory=list)
    contexts: list[NamedContext] = field(default_factory=list)
    current_context: str = ""
    other_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the plain data form, omitting empty known fields."""
        data: dict[str, Any] = dict(self.other_fields or {})
        if self.clusters:
            data["clusters"] = [_named_cluster_to_dict(c) for c in self.clusters]
        if self.users:
            data["users"] = [_named_user_to_dict(u) for u in self.users]
        if self.contexts:
            data["contexts"] = [_named_context_to_dict(c) for c in self.contexts]
        if self.current_context:
            data["current-context"] = self.current_context
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        """Build a Config from decoded YAML data (None gives an empty Config)."""
        if data is None:
            return cls()
        mapping = _as_mapping(data, "KUBECONFIG")
        known = {"clusters", "users", "contexts", "current-context"}
        return cls(
            clusters=[
                _named_cluster_from_dict(item)
                for item in _as_list(mapping.get("clusters"), "clusters")
            ],
            users=[
                _named_user_from_dict(item)
                for item in _as_list(mapping.get("users"), "users")
            ],
            contexts=[
                _named_context_from_dict(item)
                for item in _as_list(mapping.get("contexts"), "contexts")
            ],
            current_context=_as_str(mapping.get("current-context"), "current-context"),
            other_fields={k: v for k, v in mapping.items() if k not in known},
        )


def _as_mapping(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise KubeconfigError(f"expected a mapping for {what}, got {type(value).__name__}")
    return {str(k): v for k, v in value.items()}


def _as_list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise KubeconfigError(f"expected a sequence for {what}, got {type(value).__name__}")
    return value


def _as_str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise KubeconfigError(f"expected a string for {what}, got {type(value).__name__}")
    return str(value)


def _named_cluster_to_dict(entry: NamedCluster) -> dict[str, Any]:
    cluster: dict[str, Any] = dict(entry.cluster.other_fields or {})
    if entry.cluster.server:
        cluster["server"] = entry.cluster.server
    return {"name": entry.name, "cluster": cluster}


def _named_user_to_dict(entry: NamedUser) -> dict[str, Any]:
    return {"name": entry.name, "user": dict(entry.user or {})}


def _named_context_to_dict(entry: NamedContext) -> dict[str, Any]:
    context: dict[str, Any] = dict(entry.context.other_fields or {})
    context["cluster"] = entry.context.cluster
    context["user"] = entry.context.user
    return {"name": entry.name, "context": context}


def _named_cluster_from_dict(data: Any) -> NamedCluster:
    mapping = _as_mapping(data, "cluster entry")
    cluster = _as_mapping(mapping.get("cluster"), "cluster")
    return NamedCluster(
        name=_as_str(mapping.get("name"), "cluster name"),
        cluster=Cluster(
            server=_as_str(cluster.get("server"), "server"),
            other_fields={k: v for k, v in cluster.items() if k != "server"},
        ),
    )


def _named_user_from_dict(data: Any) -> NamedUser:
    mapping = _as_mapping(data, "user entry")
    user = mapping.get("user")
    return NamedUser(
        name=_as_str(mapping.get("name"), "user name"),
        user=None if user is None else _as_mapping(user, "user"),
    )


def _named_context_from_dict(data: Any) -> NamedContext:
    mapping = _as_mapping(data, "context entry")
    context = _as_mapping(mapping.get("context"), "context")
    return NamedContext(
        name=_as_str(mapping.get("name"), "context name"),
        context=Context(
            cluster=_as_str(context.get("cluster"), "context cluster"),
            user=_as_str(context.get("user"), "context user"),
            other_fields={
                k: v for k, v in context.items() if k not in ("cluster", "user")
            },
        ),
    )


def _plain(value: Any) -> Any:
    """Rebuild containers so no object is shared, which keeps YAML free of aliases."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def kind_cluster_key(cluster_name: str) -> str:
    """Return the key identifying a kind cluster in kubeconfig files."""
    return "kind-" + cluster_name


def check_kubeadm_expectations(cfg: Config) -> None:
    """Raise KubeconfigError unless cfg has exactly one cluster, user and context."""
    if len(cfg.clusters) != 1:
        raise KubeconfigError(
            f"kubeadm KUBECONFIG should have one cluster, but read {len(cfg.clusters)}"
        )
    if len(cfg.users) != 1:
        raise KubeconfigError(
            f"kubeadm KUBECONFIG should have one user, but read {len(cfg.users)}"
        )
    if len(cfg.contexts) != 1:
        raise KubeconfigError(
            f"kubeadm KUBECONFIG should have one context, but read {len(cfg.contexts)}"
        )


def encode(cfg: Config) -> str:
    """Encode cfg as normalized YAML with sorted keys; empty configs give ''."""
    data = cfg.to_dict()
    if not data:
        return ""
    try:
        return yaml.safe_dump(
            _plain(data),
            default_flow_style=False,
            sort_keys=True,
            allow_unicode=True,
            width=2**31 - 1,
        )
    except yaml.YAMLError as err:
        raise KubeconfigError(f"failed to encode KUBECONFIG: {err}") from err


def _decode(raw: str) -> Config:
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as err:
        raise KubeconfigError(f"failed to decode KUBECONFIG: {err}") from err
    return Config.from_dict(data)


def kind_from_raw_kubeadm(
    raw_kubeadm_kubeconfig: str, cluster_name: str, server: str
) -> Config:
    """Derive a kind kubeconfig from a raw kubeadm one; server is used if set."""
    cfg = _decode(raw_kubeadm_kubeconfig)
    check_kubeadm_expectations(cfg)

    key = kind_cluster_key(cluster_name)
    cfg.clusters[0].name = key
    cfg.users[0].name = key
    cfg.contexts[0].name = key
    cfg.contexts[0].context.user = key
    cfg.contexts[0].context.cluster = key
    cfg.current_context = key

    if server:
        cfg.clusters[0].cluster.server = server
    return cfg


def read(config_path: str) -> Config:
    """Load a KUBECONFIG file; a missing file gives an empty Config."""
    try:
        with open(config_path, encoding="utf-8") as handle:
            raw = handle.read()
    except FileNotFoundError:
        return Config()
    except OSError as err:
        raise KubeconfigError(f"failed to read {config_path}: {err}") from err
    return _decode(raw)