import pytest

from kindcluster.proxy import get_proxy_envs

SERVICE = "10.0.0.0/24"
POD = "12.0.0.0/24"


def _env(values):
    return lambda key: values.get(key, "")


def test_defaults_from_process_environment(monkeypatch):
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "NO_PROXY"):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)
    assert get_proxy_envs(SERVICE, POD) == {}


def test_process_environment_used(monkeypatch):
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "NO_PROXY"):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)
    monkeypatch.setenv("http_proxy", "5.5.5.5")
    result = get_proxy_envs(SERVICE, POD)
    assert result["HTTP_PROXY"] == "5.5.5.5"
    assert result["NO_PROXY"] == "10.0.0.0/24,12.0.0.0/24"


@pytest.mark.parametrize(
    "env, expected",
    [
        ({}, {}),
        (
            {"HTTP_PROXY": "5.5.5.5"},
            {
                "HTTP_PROXY": "5.5.5.5",
                "http_proxy": "5.5.5.5",
                "NO_PROXY": "10.0.0.0/24,12.0.0.0/24",
                "no_proxy": "10.0.0.0/24,12.0.0.0/24",
            },
        ),
        (
            {"HTTPS_PROXY": "5.5.5.5"},
            {
                "HTTPS_PROXY": "5.5.5.5",
                "https_proxy": "5.5.5.5",
                "NO_PROXY": "10.0.0.0/24,12.0.0.0/24",
                "no_proxy": "10.0.0.0/24,12.0.0.0/24",
            },
        ),
        (
            {"HTTPS_PROXY": "5.5.5.5", "NO_PROXY": "8.8.8.8"},
            {
                "HTTPS_PROXY": "5.5.5.5",
                "https_proxy": "5.5.5.5",
                "NO_PROXY": "8.8.8.8,10.0.0.0/24,12.0.0.0/24",
                "no_proxy": "8.8.8.8,10.0.0.0/24,12.0.0.0/24",
            },
        ),
    ],
)
def test_get_proxy_envs(env, expected):
    assert get_proxy_envs(SERVICE, POD, _env(env)) == expected


def test_lowercase_variable_used_when_uppercase_missing():
    result = get_proxy_envs(SERVICE, POD, _env({"https_proxy": "5.5.5.5"}))
    assert result["HTTPS_PROXY"] == "5.5.5.5"
    assert result["https_proxy"] == "5.5.5.5"