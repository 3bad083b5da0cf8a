"""Namespace resource tree for kubectl."""

__version__ = "1.0.0"

from .config import TreeContext  # noqa: E402,F401
from .kube import KubeTreeAPI  # noqa: E402,F401
from .operations.tree import TreeBuilder, build_and_render  # noqa: E402,F401
from .resources.collections import ResourceCollections  # noqa: E402,F401

__all__ = ["__version__", "TreeContext", "KubeTreeAPI", "TreeBuilder", "build_and_render", "ResourceCollections"]
