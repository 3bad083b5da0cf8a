"""Snapshot of the namespaced resources a tree is built from."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from kubernetes import client


def _as_tuple(items: Optional[Iterable[Any]]) -> Tuple[Any, ...]:
    return tuple(items or ())


@dataclass(frozen=True)
class ResourceCollections:
    """One ordered, read-only collection per resource kind.

    Items are the models returned by the ``kubernetes`` client, for example
    ``V1Pod`` or ``V1Deployment``. The snapshot is captured once and only read
    afterwards.
    """

    services: Tuple[client.V1Service, ...] = ()
    config_maps: Tuple[client.V1ConfigMap, ...] = ()
    secrets: Tuple[client.V1Secret, ...] = ()
    pvcs: Tuple[client.V1PersistentVolumeClaim, ...] = ()
    pods: Tuple[client.V1Pod, ...] = ()
    deployments: Tuple[client.V1Deployment, ...] = ()
    stateful_sets: Tuple[client.V1StatefulSet, ...] = ()
    daemon_sets: Tuple[client.V1DaemonSet, ...] = ()
    replica_sets: Tuple[client.V1ReplicaSet, ...] = ()
    jobs: Tuple[client.V1Job, ...] = ()
    cron_jobs: Tuple[client.V1CronJob, ...] = ()

    @classmethod
    def from_lists(cls, **collections: Optional[Iterable[Any]]) -> "ResourceCollections":
        """Build a snapshot from plain lists; kinds that are not given stay empty."""

        return cls(**{key: _as_tuple(value) for key, value in collections.items()})

    def has_workloads(self) -> bool:
        return bool(
            self.deployments
            or self.stateful_sets
            or self.daemon_sets
            or self.jobs
            or self.cron_jobs
        )
