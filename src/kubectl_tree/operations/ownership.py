"""Owner reference lookups over a namespace snapshot."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Tuple

from kubernetes import client

from ..resources.base import CRON_JOB
from ..resources.collections import ResourceCollections

_LOG = logging.getLogger(__name__)

OwnerKey = Tuple[str, str]


def owner_keys(resource: Any) -> List[OwnerKey]:
    """Return the ``(kind, name)`` of every owner reference, in declared order."""

    metadata = getattr(resource, "metadata", None)
    references = (metadata.owner_references if metadata else None) or []
    return [(ref.kind, ref.name) for ref in references]


def is_owned_by_cron_job(job: client.V1Job) -> bool:
    """Only the first owner reference is checked; a Job has at most one controller."""

    keys = owner_keys(job)
    return bool(keys) and keys[0][0] == CRON_JOB


def _index_by_owner(resources: Iterable[Any]) -> Dict[OwnerKey, List[Any]]:
    index: Dict[OwnerKey, List[Any]] = defaultdict(list)
    for resource in resources:
        # a resource naming the same owner twice is still listed once
        for key in dict.fromkeys(owner_keys(resource)):
            index[key].append(resource)
    return dict(index)


class OwnershipIndex:
    """Owned resources keyed by ``(ownerKind, ownerName)``, built once per tree build."""

    def __init__(
        self,
        pods: Dict[OwnerKey, List[client.V1Pod]],
        replica_sets: Dict[OwnerKey, List[client.V1ReplicaSet]],
        jobs: Dict[OwnerKey, List[client.V1Job]],
    ) -> None:
        self._pods = pods
        self._replica_sets = replica_sets
        self._jobs = jobs

    @classmethod
    def from_collections(cls, collections: ResourceCollections) -> "OwnershipIndex":
        _LOG.debug(
            "Indexing owners of %d pods, %d replicasets and %d jobs",
            len(collections.pods),
            len(collections.replica_sets),
            len(collections.jobs),
        )
        return cls(
            pods=_index_by_owner(collections.pods),
            replica_sets=_index_by_owner(collections.replica_sets),
            jobs=_index_by_owner(collections.jobs),
        )

    def find_pods_by_owner(self, owner_kind: str, owner_name: str) -> List[client.V1Pod]:
        return list(self._pods.get((owner_kind, owner_name), []))

    def find_replica_sets_by_owner(self, owner_kind: str, owner_name: str) -> List[client.V1ReplicaSet]:
        return list(self._replica_sets.get((owner_kind, owner_name), []))

    def find_jobs_by_owner(self, owner_kind: str, owner_name: str) -> List[client.V1Job]:
        return list(self._jobs.get((owner_kind, owner_name), []))


def find_pods_by_owner(collections: ResourceCollections, owner_kind: str, owner_name: str) -> List[client.V1Pod]:
    return OwnershipIndex.from_collections(collections).find_pods_by_owner(owner_kind, owner_name)


def find_replica_sets_by_owner(
    collections: ResourceCollections, owner_kind: str, owner_name: str
) -> List[client.V1ReplicaSet]:
    return OwnershipIndex.from_collections(collections).find_replica_sets_by_owner(owner_kind, owner_name)


def find_jobs_by_owner(collections: ResourceCollections, owner_kind: str, owner_name: str) -> List[client.V1Job]:
    return OwnershipIndex.from_collections(collections).find_jobs_by_owner(owner_kind, owner_name)
