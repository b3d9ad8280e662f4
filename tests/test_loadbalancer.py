from kindcluster.loadbalancer import ConfigData, render_config

SERVER_OPTIONS = "check check-ssl verify none resolvers docker resolve-prefer"


def _lines(text):
    return text.split("\n")


def test_preamble_is_fixed():
    out = render_config(ConfigData(control_plane_port=6443))
    assert out.startswith("# generated by kind\nglobal\n")
    assert "  maxconn 100000\n" in out
    assert "  nameserver dns 127.0.0.11:53\n" in out
    assert "frontend control-plane\n  bind *:6443\n" in out


def test_ipv4_has_single_bind_and_ipv4_servers():
    data = ConfigData(
        control_plane_port=6443,
        backend_servers={"kind-control-plane": "kind-control-plane:6443"},
    )
    out = render_config(data)
    assert ":::" not in out
    lines = _lines(out)
    assert f"  server kind-control-plane kind-control-plane:6443 {SERVER_OPTIONS} ipv4" in lines
    bind_index = lines.index("  bind *:6443")
    assert lines[bind_index + 2] == "  default_backend kube-apiservers"


def test_ipv6_adds_second_bind_and_prefers_ipv6():
    data = ConfigData(
        control_plane_port=6443,
        backend_servers={"kind-control-plane": "kind-control-plane:6443"},
        ipv6=True,
    )
    lines = _lines(render_config(data))
    bind_index = lines.index("  bind *:6443")
    assert lines[bind_index + 1] == "  bind :::6443;"
    assert lines[bind_index + 2] == "  default_backend kube-apiservers"
    assert f"  server kind-control-plane kind-control-plane:6443 {SERVER_OPTIONS} ipv6" in lines
    assert not any(line.endswith("ipv4") for line in lines)


def test_servers_are_sorted_by_name():
    data = ConfigData(
        control_plane_port=1234,
        backend_servers={
            "kind-control-plane3": "kind-control-plane3:6443",
            "kind-control-plane": "kind-control-plane:6443",
            "kind-control-plane2": "kind-control-plane2:6443",
        },
    )
    server_lines = [
        line for line in _lines(render_config(data)) if line.startswith("  server ")
    ]
    names = [line.split()[1] for line in server_lines]
    assert names == ["kind-control-plane", "kind-control-plane2", "kind-control-plane3"]
    assert "  bind *:1234" in _lines(render_config(data))


def test_no_backends_and_trailing_newline():
    out = render_config(ConfigData(control_plane_port=6443))
    assert not any(line.startswith("  server ") for line in _lines(out))
    assert out.endswith("\n")
    assert "  option httpchk GET /healthz\n" in out