from kubectl_tree.operations.related import (
    FoundSet,
    config_map_from_env,
    config_map_mounted,
    find_related_resources,
    pvc_from_claim_template,
    pvc_name_contains_workload,
    secret_from_env,
    secret_mounted,
    service_named_for_stateful_set,
    service_selects_workload,
)
from kubectl_tree.resources.base import ResourceRef
from kubectl_tree.resources.collections import ResourceCollections
from kubectl_tree.resources.pod_spec import extract_pod_spec

from factories import (
    config_map,
    config_map_volume,
    container,
    deployment,
    pod_spec,
    pvc,
    pvc_volume,
    secret,
    secret_volume,
    service,
    stateful_set,
)


def _names(resources):
    return [item.metadata.name for item in resources]


def test_service_selector_must_be_fully_satisfied():
    workload = deployment("web", template_labels={"app": "web", "tier": "frontend"})

    assert service_selects_workload(service("web", {"app": "web"}), workload, None)
    assert service_selects_workload(service("web", {"app": "web", "tier": "frontend"}), workload, None)
    assert not service_selects_workload(service("web", {"app": "web", "tier": "backend"}), workload, None)
    assert not service_selects_workload(service("web", {"app": "web", "zone": "a"}), workload, None)


def test_service_without_selector_never_matches():
    workload = deployment("web", template_labels={"app": "web"})

    assert not service_selects_workload(service("web"), workload, None)
    assert not service_selects_workload(service("web", {}), workload, None)


def test_service_selector_uses_workload_metadata_labels_too():
    workload = deployment("web", labels={"app": "web"})

    assert service_selects_workload(service("web", {"app": "web"}), workload, None)


def test_headless_service_name_rule_is_stateful_set_only():
    sts = stateful_set("db")

    assert service_named_for_stateful_set(service("db"), sts, None)
    assert service_named_for_stateful_set(service("db-headless"), sts, None)
    assert not service_named_for_stateful_set(service("db-metrics"), sts, None)
    assert not service_named_for_stateful_set(service("mydb"), sts, None)
    assert not service_named_for_stateful_set(service("db"), deployment("db"), None)


def test_config_map_rules():
    spec = pod_spec(
        volumes=[config_map_volume("settings")],
        containers=[container(env_from_config_maps=["env-settings"])],
    )
    workload = deployment("web", spec=spec)

    assert config_map_mounted(config_map("settings"), workload, spec)
    assert not config_map_mounted(config_map("env-settings"), workload, spec)
    assert config_map_from_env(config_map("env-settings"), workload, spec)
    assert not config_map_from_env(config_map("settings"), workload, spec)


def test_secret_rules():
    spec = pod_spec(
        volumes=[secret_volume("tls")],
        containers=[container(env_from_secrets=["creds"], secret_env=["token"])],
    )
    workload = deployment("web", spec=spec)

    assert secret_mounted(secret("tls"), workload, spec)
    assert secret_from_env(secret("creds"), workload, spec)
    assert secret_from_env(secret("token"), workload, spec)
    assert not secret_from_env(secret("tls"), workload, spec)


def test_claim_template_rule_covers_first_ordinal_only():
    sts = stateful_set("db", claim_templates=["data"])

    assert pvc_from_claim_template(pvc("data-db-0"), sts, None)
    assert not pvc_from_claim_template(pvc("data-db-1"), sts, None)
    assert not pvc_from_claim_template(pvc("data-db-0"), deployment("db"), None)


def test_name_contains_rule_is_stateful_set_only():
    assert pvc_name_contains_workload(pvc("cache-db-0"), stateful_set("db"), None)
    assert not pvc_name_contains_workload(pvc("cache-db-0"), deployment("db"), None)


def test_find_related_resources_collects_every_kind():
    spec = pod_spec(
        volumes=[config_map_volume("settings"), secret_volume("tls"), pvc_volume("uploads")],
        containers=[container(env_from_secrets=["creds"])],
    )
    workload = deployment("web", template_labels={"app": "web"}, spec=spec)
    collections = ResourceCollections.from_lists(
        services=[service("web", {"app": "web"}), service("api", {"app": "api"})],
        config_maps=[config_map("settings"), config_map("unused")],
        secrets=[secret("creds"), secret("tls"), secret("unused")],
        pvcs=[pvc("uploads"), pvc("other")],
    )

    related = find_related_resources(collections, workload, spec, FoundSet())

    assert _names(related.services) == ["web"]
    assert _names(related.config_maps) == ["settings"]
    assert _names(related.secrets) == ["creds", "tls"]
    assert _names(related.pvcs) == ["uploads"]


def test_missing_references_yield_empty_results():
    spec = pod_spec(volumes=[config_map_volume("absent"), secret_volume("absent")])
    workload = deployment("web", spec=spec)

    related = find_related_resources(ResourceCollections(), workload, spec, FoundSet())

    assert related.services == []
    assert related.config_maps == []
    assert related.secrets == []
    assert related.pvcs == []


def test_found_set_shares_config_objects_across_workloads():
    spec = pod_spec(volumes=[config_map_volume("shared")])
    first = deployment("first", spec=spec)
    second = deployment("second", spec=spec)
    collections = ResourceCollections.from_lists(config_maps=[config_map("shared")])
    found = FoundSet()

    first_related = find_related_resources(collections, first, spec, found)
    second_related = find_related_resources(collections, second, spec, found)

    assert _names(first_related.config_maps) == ["shared"]
    assert second_related.config_maps == []
    assert ResourceRef("ConfigMap", "shared") in found


def test_services_are_not_deduplicated():
    collections = ResourceCollections.from_lists(services=[service("shared", {"team": "a"})])
    found = FoundSet()
    first = deployment("first", template_labels={"team": "a"})
    second = deployment("second", template_labels={"team": "a"})

    assert _names(find_related_resources(collections, first, extract_pod_spec(first), found).services) == ["shared"]
    assert _names(find_related_resources(collections, second, extract_pod_spec(second), found).services) == ["shared"]
    assert len(found) == 0


def test_same_secret_from_volume_and_env_is_listed_once():
    spec = pod_spec(volumes=[secret_volume("creds")], containers=[container(env_from_secrets=["creds"], secret_env=["creds"])])
    workload = deployment("web", spec=spec)
    collections = ResourceCollections.from_lists(secrets=[secret("creds")])

    related = find_related_resources(collections, workload, spec, FoundSet())

    assert _names(related.secrets) == ["creds"]


def test_stateful_set_fallback_only_for_unresolved_claims():
    collections = ResourceCollections.from_lists(pvcs=[pvc("data-db-0"), pvc("data-db-1"), pvc("db-backup")])

    resolved_spec = pod_spec(volumes=[pvc_volume("db-backup")])
    resolved = stateful_set("db", spec=resolved_spec, claim_templates=["data"])
    related = find_related_resources(collections, resolved, resolved_spec, FoundSet())
    assert _names(related.pvcs) == ["data-db-0", "db-backup"]

    unresolved_spec = pod_spec(volumes=[pvc_volume("missing")])
    unresolved = stateful_set("db", spec=unresolved_spec)
    related = find_related_resources(collections, unresolved, unresolved_spec, FoundSet())
    assert _names(related.pvcs) == ["data-db-0", "data-db-1", "db-backup"]
