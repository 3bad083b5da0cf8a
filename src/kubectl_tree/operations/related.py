"""Inference of resources associated with a workload without an owner reference.

Every rule is a predicate ``rule(candidate, workload, pod_spec) -> bool``. A
candidate is related to the workload when any rule registered for its kind
matches. Services may be related to several workloads; ConfigMaps, Secrets
and PVCs are attached to the first workload that claims them in a
:class:`FoundSet`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Sequence, Set

from kubernetes import client

from ..resources.base import CONFIG_MAP, PVC, SECRET, ResourceRef
from ..resources.collections import ResourceCollections
from ..resources.pod_spec import extract_pod_labels
from ..utils import selector_matches

_LOG = logging.getLogger(__name__)

Rule = Callable[[Any, Any, Optional[client.V1PodSpec]], bool]


class FoundSet:
    """Resources already attached somewhere in the current tree build."""

    def __init__(self) -> None:
        self._claimed: Set[ResourceRef] = set()

    def claim(self, ref: ResourceRef) -> bool:
        """Record ``ref``; return False if an earlier workload already claimed it."""

        if ref in self._claimed:
            return False
        self._claimed.add(ref)
        return True

    def __contains__(self, ref: object) -> bool:
        return ref in self._claimed

    def __len__(self) -> int:
        return len(self._claimed)


@dataclass
class RelatedResources:
    services: List[client.V1Service] = field(default_factory=list)
    config_maps: List[client.V1ConfigMap] = field(default_factory=list)
    secrets: List[client.V1Secret] = field(default_factory=list)
    pvcs: List[client.V1PersistentVolumeClaim] = field(default_factory=list)


def _name(resource: Any) -> Optional[str]:
    metadata = getattr(resource, "metadata", None)
    return metadata.name if metadata else None


def _volumes(pod_spec: Optional[client.V1PodSpec]) -> List[client.V1Volume]:
    return list((pod_spec.volumes if pod_spec else None) or [])


def _containers(pod_spec: Optional[client.V1PodSpec]) -> List[client.V1Container]:
    return list((pod_spec.containers if pod_spec else None) or [])


def _claim_names(pod_spec: Optional[client.V1PodSpec]) -> List[str]:
    return [
        volume.persistent_volume_claim.claim_name
        for volume in _volumes(pod_spec)
        if volume.persistent_volume_claim is not None
    ]


# Services


def service_selects_workload(service: client.V1Service, workload: Any, pod_spec: Optional[client.V1PodSpec]) -> bool:
    selector = service.spec.selector if service.spec else None
    return selector_matches(selector, extract_pod_labels(workload))


def service_named_for_stateful_set(
    service: client.V1Service, workload: Any, pod_spec: Optional[client.V1PodSpec]
) -> bool:
    """Headless services are paired with a StatefulSet by name."""

    if not isinstance(workload, client.V1StatefulSet):
        return False
    workload_name = _name(workload)
    return _name(service) in (workload_name, f"{workload_name}-headless")


# ConfigMaps


def config_map_mounted(config_map: client.V1ConfigMap, workload: Any, pod_spec: Optional[client.V1PodSpec]) -> bool:
    name = _name(config_map)
    return any(volume.config_map is not None and volume.config_map.name == name for volume in _volumes(pod_spec))


def config_map_from_env(config_map: client.V1ConfigMap, workload: Any, pod_spec: Optional[client.V1PodSpec]) -> bool:
    name = _name(config_map)
    for container in _containers(pod_spec):
        for env_from in container.env_from or []:
            if env_from.config_map_ref is not None and env_from.config_map_ref.name == name:
                return True
    return False


# Secrets


def secret_mounted(secret: client.V1Secret, workload: Any, pod_spec: Optional[client.V1PodSpec]) -> bool:
    name = _name(secret)
    return any(volume.secret is not None and volume.secret.secret_name == name for volume in _volumes(pod_spec))


def secret_from_env(secret: client.V1Secret, workload: Any, pod_spec: Optional[client.V1PodSpec]) -> bool:
    name = _name(secret)
    for container in _containers(pod_spec):
        for env_from in container.env_from or []:
            if env_from.secret_ref is not None and env_from.secret_ref.name == name:
                return True
        for env in container.env or []:
            source = env.value_from
            if source is not None and source.secret_key_ref is not None and source.secret_key_ref.name == name:
                return True
    return False


# PersistentVolumeClaims


def pvc_claimed(pvc: client.V1PersistentVolumeClaim, workload: Any, pod_spec: Optional[client.V1PodSpec]) -> bool:
    return _name(pvc) in _claim_names(pod_spec)


def pvc_from_claim_template(
    pvc: client.V1PersistentVolumeClaim, workload: Any, pod_spec: Optional[client.V1PodSpec]
) -> bool:
    """Match the claim of the first replica, ``<template>-<statefulset>-0``.

    Claims of ordinals 1..N-1 are not matched.
    """

    if not isinstance(workload, client.V1StatefulSet):
        return False
    workload_name = _name(workload)
    templates = (workload.spec.volume_claim_templates if workload.spec else None) or []
    expected = {f"{_name(template)}-{workload_name}-0" for template in templates}
    return _name(pvc) in expected


def pvc_name_contains_workload(
    pvc: client.V1PersistentVolumeClaim, workload: Any, pod_spec: Optional[client.V1PodSpec]
) -> bool:
    """Loose StatefulSet match; may over-match when names are substrings of each other."""

    if not isinstance(workload, client.V1StatefulSet):
        return False
    workload_name = _name(workload)
    pvc_name = _name(pvc)
    return bool(workload_name and pvc_name and workload_name in pvc_name)


SERVICE_RULES: Sequence[Rule] = (service_selects_workload, service_named_for_stateful_set)
CONFIG_MAP_RULES: Sequence[Rule] = (config_map_mounted, config_map_from_env)
SECRET_RULES: Sequence[Rule] = (secret_mounted, secret_from_env)
PVC_RULES: Sequence[Rule] = (pvc_claimed, pvc_from_claim_template)
# only consulted when a volume claims a PVC missing from the snapshot
PVC_FALLBACK_RULES: Sequence[Rule] = (pvc_name_contains_workload,)


def _matching(
    candidates: Iterable[Any],
    rules: Sequence[Rule],
    workload: Any,
    pod_spec: Optional[client.V1PodSpec],
) -> List[Any]:
    matched: List[Any] = []
    seen: Set[Optional[str]] = set()
    for candidate in candidates:
        name = _name(candidate)
        if name in seen:
            continue
        if any(rule(candidate, workload, pod_spec) for rule in rules):
            matched.append(candidate)
            seen.add(name)
    return matched


def _claimed(kind: str, candidates: Iterable[Any], found: FoundSet) -> List[Any]:
    return [candidate for candidate in candidates if found.claim(ResourceRef(kind, _name(candidate)))]


def has_unresolved_claim(collections: ResourceCollections, pod_spec: Optional[client.V1PodSpec]) -> bool:
    """True if a pod volume claims a PVC that is not part of the snapshot."""

    known = {_name(pvc) for pvc in collections.pvcs}
    return any(claim not in known for claim in _claim_names(pod_spec))


def find_related_resources(
    collections: ResourceCollections,
    workload: Any,
    pod_spec: Optional[client.V1PodSpec],
    found: FoundSet,
) -> RelatedResources:
    """Return the Services, ConfigMaps, Secrets and PVCs associated with ``workload``.

    ``found`` is shared by all workloads of one tree build and is updated with
    every ConfigMap, Secret and PVC returned here.
    """

    pvc_rules = tuple(PVC_RULES)
    if has_unresolved_claim(collections, pod_spec):
        pvc_rules += tuple(PVC_FALLBACK_RULES)

    related = RelatedResources(
        services=_matching(collections.services, SERVICE_RULES, workload, pod_spec),
        config_maps=_claimed(
            CONFIG_MAP, _matching(collections.config_maps, CONFIG_MAP_RULES, workload, pod_spec), found
        ),
        secrets=_claimed(SECRET, _matching(collections.secrets, SECRET_RULES, workload, pod_spec), found),
        pvcs=_claimed(PVC, _matching(collections.pvcs, pvc_rules, workload, pod_spec), found),
    )
    _LOG.debug(
        "Found resources for %s: services=%d, configmaps=%d, secrets=%d, pvcs=%d",
        _name(workload),
        len(related.services),
        len(related.config_maps),
        len(related.secrets),
        len(related.pvcs),
    )
    return related
