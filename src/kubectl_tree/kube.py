"""Low-level Kubernetes client helpers for kubectl-tree."""
from __future__ import annotations

import logging
from typing import Any, Callable, List

from kubernetes import client, config
from kubernetes.client import ApiException

from .config import TreeContext
from .resources.collections import ResourceCollections

_LOG = logging.getLogger(__name__)


class KubeTreeAPI:
    """Wrapper around the typed Kubernetes clients used to snapshot a namespace."""

    def __init__(self, context: TreeContext) -> None:
        self.context = context
        api_client = config.new_client_from_config(
            config_file=context.kubeconfig,
            context=context.context,
        )
        api_client.configuration.verify_ssl = context.verify_ssl
        self.api_client = api_client
        self.core_v1 = client.CoreV1Api(api_client)
        self.apps_v1 = client.AppsV1Api(api_client)
        self.batch_v1 = client.BatchV1Api(api_client)

    def namespace_exists(self, namespace: str) -> bool:
        try:
            self.core_v1.read_namespace(name=namespace)
        except ApiException as exc:
            if exc.status == 404:
                _LOG.debug("Namespace %s not found", namespace)
                return False
            raise
        return True

    def fetch_resources(self, namespace: str) -> ResourceCollections:
        """List every resource kind the tree is built from.

        ``ApiException`` is propagated unchanged; a failure on any kind aborts
        the whole fetch.
        """

        return ResourceCollections.from_lists(
            services=self._list_all(self.core_v1.list_namespaced_service, namespace),
            config_maps=self._list_all(self.core_v1.list_namespaced_config_map, namespace),
            secrets=self._list_all(self.core_v1.list_namespaced_secret, namespace),
            pvcs=self._list_all(self.core_v1.list_namespaced_persistent_volume_claim, namespace),
            pods=self._list_all(self.core_v1.list_namespaced_pod, namespace),
            deployments=self._list_all(self.apps_v1.list_namespaced_deployment, namespace),
            stateful_sets=self._list_all(self.apps_v1.list_namespaced_stateful_set, namespace),
            daemon_sets=self._list_all(self.apps_v1.list_namespaced_daemon_set, namespace),
            replica_sets=self._list_all(self.apps_v1.list_namespaced_replica_set, namespace),
            jobs=self._list_all(self.batch_v1.list_namespaced_job, namespace),
            cron_jobs=self._list_all(self.batch_v1.list_namespaced_cron_job, namespace),
        )

    @staticmethod
    def _list_all(list_call: Callable[..., Any], namespace: str) -> List[Any]:
        """Follow ``continue`` tokens until the collection is complete."""

        items: List[Any] = []
        token = None
        while True:
            kwargs = {"_continue": token} if token else {}
            result = list_call(namespace, **kwargs)
            items.extend(result.items or [])
            token = result.metadata._continue if result.metadata else None
            if not token:
                break
        _LOG.debug("Fetched %d items with %s", len(items), getattr(list_call, "__name__", list_call))
        return items
