# kindcluster

Building blocks for tools that run Kubernetes clusters inside containers.
The package reads, merges and cleans up kubeconfig files, names cluster
nodes, works out proxy settings for nodes, picks free host ports, renders
the HAProxy configuration for a control-plane load balancer and unpacks
node log archives onto the host.

## Installation

```
pip install kindcluster
```

Python 3.10 or newer is required. The only runtime dependency is PyYAML.

## Kubeconfig documents

`kindcluster.kubeconfig` holds the data model (`Config`, `NamedCluster`,
`Cluster`, `NamedUser`, `NamedContext`, `Context`) and its encoding.
Fields the package does not inspect are kept in `other_fields` and written
back unchanged.

- `kind_cluster_key(name)` gives the entry name for a cluster: `"dev"`
  becomes `"kind-dev"`.
- `kind_from_raw_kubeadm(raw, cluster_name, server)` parses a kubeadm
  `admin.conf` text, renames its cluster, user and context entries (and the
  current context) to the cluster key, and replaces the server address when
  `server` is not empty.
- `check_kubeadm_expectations(cfg)` raises `KubeconfigError` unless `cfg`
  has exactly one cluster, one user and one context;
  `kind_from_raw_kubeadm` applies it too.
- `encode(cfg)` returns YAML with sorted keys; an empty config encodes to
  the empty string.
- `read(path)` loads a file; a missing file gives an empty `Config`.
- `Config.to_dict()` and `Config.from_dict(data)` convert to and from plain
  data.

```python
from kindcluster.kubeconfig import encode, kind_from_raw_kubeadm

cfg = kind_from_raw_kubeadm(raw_admin_conf, "dev", "https://127.0.0.1:6443")
print(encode(cfg))
```

## Kubeconfig files

`kindcluster.kubeconfig_paths` chooses files the way `kubectl` does:
`paths(explicit_path, get_env)` returns the explicit path if given,
otherwise the entries of `KUBECONFIG` (empty and repeated entries dropped),
otherwise `$HOME/.kube/config`. `path_for_merge` picks the first of those
that exists, or the last one. `home_dir(goos, get_env)` applies the Windows
home-directory rules when `goos` is `"windows"`.

While a file is changed, a `<file>.lock` file is created next to it
(`lock_file` / `unlock_file`, or the `locked(filename)` context manager);
creating it fails if the lock is already held.

`kindcluster.kubeconfig_store` changes the files:

```python
import os
from kindcluster.kubeconfig_store import remove_kind, write_merged

write_merged(cfg, "")   # merge into the kubeconfig and make it current
remove_kind("dev", "")  # drop kind-dev entries from every kubeconfig file
```

`merge(existing, kind)` and `remove(cfg, name)` do the same on `Config`
objects in memory (`remove` returns whether anything changed), and
`write(cfg, path)` writes a config with mode 0600, creating missing
directories. Failures raise `KubeconfigError`.

## Cluster helpers

- `kindcluster.nodes.make_node_namer("dev")` returns a callable naming nodes
  by role: `dev-control-plane`, `dev-worker`, `dev-worker2`, ...
- `kindcluster.nodes.required_node_images(nodes)` returns the set of
  `image` values of the given node objects.
  `kindcluster.nodes.API_SERVER_INTERNAL_PORT` is 6443.
- `kindcluster.proxy.get_proxy_envs(service_subnet, pod_subnet, get_env=None)`
  collects `HTTP_PROXY`, `HTTPS_PROXY` and `NO_PROXY` (falling back to the
  lower-case names, reading the process environment by default), returns
  them in both cases, and appends the two subnets to `NO_PROXY` when any
  proxy is set.
- `kindcluster.ports.port_or_get_free_port(port, "127.0.0.1")` keeps a
  given port, picks a free one for `0` and returns `0` for `-1`;
  `get_free_port(addr)` raises `OSError` if nothing can be bound there.
- `kindcluster.cgroups.wait_until_log_regexp_matches(lines, pattern)` reads
  an iterable of log lines until one matches, raising `LogMatchError` if
  none does; `node_reached_cgroups_ready_regexp()` is the pattern for a node
  whose cgroups are ready.

## Load balancer

```python
from kindcluster.loadbalancer import ConfigData, render_config

text = render_config(ConfigData(
    control_plane_port=6443,
    backend_servers={"dev-control-plane": "dev-control-plane:6443"},
    ipv6=False,
))
```

Backend servers are written in sorted order of name. `IMAGE` and
`CONFIG_PATH` name the HAProxy image and where the configuration goes in it.

## Logs

`kindcluster.logs.untar(reader, directory)` unpacks a binary tar stream into
a host directory. Regular files and directories are written, other entry
types are logged and skipped, and a broken archive raises `UntarError`.
`file_on_host(path)` creates a file, and any missing parent directories,
and returns it open for binary writing.

## What this package does not do

It does not create, start or delete clusters and does not talk to a
container runtime. There is no command-line tool. Reading `admin.conf` from
a node, streaming a node's logs or producing a tar of its log directory is
left to the caller, who passes the resulting text, lines or byte stream to
the functions above.

## Running the tests

```
pip install -e .[test]
pytest
```