"""Assembly of the namespace resource tree."""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from kubernetes import client

from ..printer import TreePrinter
from ..resources.base import (
    CONFIG_MAP,
    CONTAINER,
    CRON_JOB,
    DAEMON_SET,
    DEPLOYMENT,
    JOB,
    NAMESPACE,
    POD,
    PVC,
    REPLICA_SET,
    SECRET,
    SERVICE,
    STATEFUL_SET,
    ResourceNode,
)
from ..resources.collections import ResourceCollections
from ..resources.pod_spec import extract_pod_spec
from .ownership import OwnershipIndex, is_owned_by_cron_job
from .related import FoundSet, find_related_resources

_LOG = logging.getLogger(__name__)


def sort_tree(node: ResourceNode) -> ResourceNode:
    """Order the children of every node by ``(kind, name)``, in place."""

    node.children.sort(key=lambda child: (child.kind, child.name))
    for child in node.children:
        sort_tree(child)
    return node


class TreeBuilder:
    """Builds the resource tree of one namespace from a snapshot."""

    def __init__(self, collections: ResourceCollections, show_containers: bool = False) -> None:
        self.collections = collections
        self.show_containers = show_containers

    def build_tree(self, namespace: str) -> Optional[ResourceNode]:
        """Return the sorted tree rooted at the namespace.

        Returns ``None`` when the namespace has no Deployments, StatefulSets,
        DaemonSets, Jobs or CronJobs. Resources without an owning workload
        are not listed.
        """

        if not self.collections.has_workloads():
            _LOG.debug("No workloads found in namespace %s", namespace)
            return None

        index = OwnershipIndex.from_collections(self.collections)
        found = FoundSet()
        root = ResourceNode(kind=NAMESPACE, name=namespace)

        for deployment in self.collections.deployments:
            node = root.add_child(DEPLOYMENT, deployment.metadata.name)
            self._add_related_resources(deployment, node, found)
            for replica_set in index.find_replica_sets_by_owner(DEPLOYMENT, deployment.metadata.name):
                replica_set_node = node.add_child(REPLICA_SET, replica_set.metadata.name)
                self._add_pods(index, REPLICA_SET, replica_set.metadata.name, replica_set_node)

        for stateful_set in self.collections.stateful_sets:
            node = root.add_child(STATEFUL_SET, stateful_set.metadata.name)
            self._add_related_resources(stateful_set, node, found)
            self._add_pods(index, STATEFUL_SET, stateful_set.metadata.name, node)

        for daemon_set in self.collections.daemon_sets:
            node = root.add_child(DAEMON_SET, daemon_set.metadata.name)
            self._add_related_resources(daemon_set, node, found)
            self._add_pods(index, DAEMON_SET, daemon_set.metadata.name, node)

        for job in self.collections.jobs:
            if is_owned_by_cron_job(job):
                continue
            node = root.add_child(JOB, job.metadata.name)
            self._add_related_resources(job, node, found)
            self._add_pods(index, JOB, job.metadata.name, node)

        # Jobs created by a CronJob get no related resources of their own.
        for cron_job in self.collections.cron_jobs:
            node = root.add_child(CRON_JOB, cron_job.metadata.name)
            for job in index.find_jobs_by_owner(CRON_JOB, cron_job.metadata.name):
                job_node = node.add_child(JOB, job.metadata.name)
                self._add_pods(index, JOB, job.metadata.name, job_node)

        return sort_tree(root)

    def _add_related_resources(self, workload: Any, node: ResourceNode, found: FoundSet) -> None:
        pod_spec = extract_pod_spec(workload)
        related = find_related_resources(self.collections, workload, pod_spec, found)
        for kind, resources in (
            (SERVICE, related.services),
            (CONFIG_MAP, related.config_maps),
            (SECRET, related.secrets),
            (PVC, related.pvcs),
        ):
            for resource in resources:
                _LOG.debug("Adding %s %s to %s", kind, resource.metadata.name, node.name)
                node.add_child(kind, resource.metadata.name)

    def _add_pods(self, index: OwnershipIndex, owner_kind: str, owner_name: str, node: ResourceNode) -> None:
        for pod in index.find_pods_by_owner(owner_kind, owner_name):
            pod_node = node.add_child(POD, pod.metadata.name)
            if self.show_containers:
                self._add_containers(pod, pod_node)

    @staticmethod
    def _add_containers(pod: client.V1Pod, node: ResourceNode) -> None:
        containers = (pod.spec.containers if pod.spec else None) or []
        for container in containers:
            node.add_child(CONTAINER, container.name)


def build_and_render(
    namespace: str,
    collections: ResourceCollections,
    use_color: bool = False,
    show_containers: bool = False,
) -> Optional[List[str]]:
    """Build, sort and render the tree; ``None`` means the namespace has no workloads."""

    root = TreeBuilder(collections, show_containers=show_containers).build_tree(namespace)
    if root is None:
        return None
    return TreePrinter(use_color=use_color).render_ansi(root)
