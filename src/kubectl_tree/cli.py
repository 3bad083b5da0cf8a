"""Command line entry point for kubectl-tree."""
from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
import yaml
from kubernetes.client import ApiException
from kubernetes.config import ConfigException
from rich import print as rich_print
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import TreeContext, resolve_namespace
from .kube import KubeTreeAPI
from .operations.tree import TreeBuilder
from .printer import TreePrinter

_LOG = logging.getLogger(__name__)

app = typer.Typer(
    help="Display the workloads of a Kubernetes namespace and their related resources as a tree.",
    add_completion=False,
)


class OutputFormat(str, Enum):
    tree = "tree"
    yaml = "yaml"
    json = "json"


def _configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, log_time_format="%X")],
    )


def _create_api(context: TreeContext) -> KubeTreeAPI:
    return KubeTreeAPI(context)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"kubectl-tree version {__version__}")
        raise typer.Exit()


@app.command()
def tree(
    namespace: Optional[str] = typer.Option(
        None, "-n", "--namespace", help="Namespace to show the tree for (defaults to the current namespace)."
    ),
    kubeconfig: Optional[Path] = typer.Option(None, envvar="KUBECONFIG", help="Path to kubeconfig file."),
    kube_context: Optional[str] = typer.Option(None, "--context", help="Override kubeconfig context."),
    output: OutputFormat = typer.Option(OutputFormat.tree, "-o", "--output", help="Output format."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output."),
    containers: bool = typer.Option(False, "--containers", help="Show the containers of every pod."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version information and exit."
    ),
) -> None:
    """Show the resources of a namespace as a tree."""

    _configure_logging(debug)
    kubeconfig_path = str(kubeconfig) if kubeconfig else None

    try:
        target_namespace = resolve_namespace(namespace, kubeconfig_path, kube_context)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    context = TreeContext(
        namespace=target_namespace,
        kubeconfig=kubeconfig_path,
        context=kube_context,
        use_color=not no_color,
        show_containers=containers,
    )

    try:
        api = _create_api(context)
        if not api.namespace_exists(target_namespace):
            typer.echo(f"Error: namespace '{target_namespace}' not found", err=True)
            raise typer.Exit(code=1)
        collections = api.fetch_resources(target_namespace)
    except (ApiException, ConfigException) as exc:
        _LOG.debug("Fetching resources failed", exc_info=True)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    root = TreeBuilder(collections, show_containers=context.show_containers).build_tree(target_namespace)
    if root is None:
        rich_print(f"No resources found in {target_namespace} namespace.")
        return

    if output is OutputFormat.yaml:
        typer.echo(yaml.safe_dump(root.to_dict(), sort_keys=False), nl=False)
    elif output is OutputFormat.json:
        typer.echo(json.dumps(root.to_dict(), indent=2))
    else:
        TreePrinter(use_color=context.use_color).print_tree(root, Console(highlight=False))


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
