"""Configuration models and helpers for kubectl-tree."""
from __future__ import annotations

import logging
from typing import Optional

from kubernetes import config
from kubernetes.config import ConfigException
from pydantic import BaseModel, Field

_LOG = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"
MAX_NAMESPACE_LENGTH = 253


class TreeContext(BaseModel):
    """Connection context and display preferences for one tree invocation."""

    namespace: Optional[str] = None
    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    verify_ssl: bool = True
    use_color: bool = Field(default=True)
    show_containers: bool = False


def validate_namespace(namespace: str) -> str:
    if not namespace or not namespace.strip():
        raise ValueError("Namespace cannot be empty.")
    namespace = namespace.strip()
    if len(namespace) > MAX_NAMESPACE_LENGTH:
        raise ValueError(f"Namespace name cannot be longer than {MAX_NAMESPACE_LENGTH} characters.")
    return namespace


def current_namespace(kubeconfig: Optional[str] = None, context: Optional[str] = None) -> str:
    """Return the namespace of the selected kubeconfig context.

    Falls back to ``default`` when the context sets no namespace or the
    kubeconfig cannot be read.
    """

    try:
        contexts, active_context = config.list_kube_config_contexts(config_file=kubeconfig)
    except (ConfigException, OSError) as exc:
        _LOG.debug("Could not read kubeconfig, using namespace %s: %s", DEFAULT_NAMESPACE, exc)
        return DEFAULT_NAMESPACE

    selected = active_context
    if context:
        selected = next((entry for entry in contexts or [] if entry.get("name") == context), None)
    if not selected:
        _LOG.debug("Context %s not found in kubeconfig", context or "(current)")
        return DEFAULT_NAMESPACE
    return (selected.get("context") or {}).get("namespace") or DEFAULT_NAMESPACE


def resolve_namespace(
    namespace: Optional[str],
    kubeconfig: Optional[str] = None,
    context: Optional[str] = None,
) -> str:
    """Use the explicit namespace when given, otherwise the kubeconfig's current one."""

    if namespace is not None:
        return validate_namespace(namespace)
    return current_namespace(kubeconfig, context)
