"""Kubeconfig handling, node naming, proxy, port, load balancer and log helpers for local container-based Kubernetes clusters."""

__version__ = "0.1.0"