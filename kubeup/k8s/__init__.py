"""Kubernetes interaction module."""

from .client import K8sClient
from .inspector import ClusterInspector

__all__ = ["K8sClient", "ClusterInspector"]
