"""Shared resource tree definitions for kubectl-tree."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

NAMESPACE = "Namespace"
DEPLOYMENT = "Deployment"
STATEFUL_SET = "StatefulSet"
DAEMON_SET = "DaemonSet"
REPLICA_SET = "ReplicaSet"
JOB = "Job"
CRON_JOB = "CronJob"
POD = "Pod"
CONTAINER = "Container"
SERVICE = "Service"
CONFIG_MAP = "ConfigMap"
SECRET = "Secret"
PVC = "PersistentVolumeClaim"


@dataclass(frozen=True)
class ResourceRef:
    """Identity of a resource inside one namespace."""

    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}/{self.name}"


@dataclass
class ResourceNode:
    """A resource placed in the tree together with the resources attached to it."""

    kind: str
    name: str
    children: List["ResourceNode"] = field(default_factory=list)

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(self.kind, self.name)

    def add_child(self, kind: str, name: str) -> "ResourceNode":
        child = ResourceNode(kind=kind, name=name)
        self.children.append(child)
        return child

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "children": [child.to_dict() for child in self.children],
        }
