"""Connector-based rendering of a resource tree."""
from __future__ import annotations

from typing import Dict, List, Optional

from rich.console import Console

from .resources.base import (
    CONFIG_MAP,
    CRON_JOB,
    DAEMON_SET,
    DEPLOYMENT,
    JOB,
    POD,
    PVC,
    SECRET,
    SERVICE,
    STATEFUL_SET,
    ResourceNode,
)

LAST_CONNECTOR = "└── "
CONNECTOR = "├── "
LAST_INDENT = "    "
INDENT = "│   "

KIND_COLORS: Dict[str, str] = {
    DEPLOYMENT: "blue",
    STATEFUL_SET: "blue",
    DAEMON_SET: "blue",
    JOB: "blue",
    CRON_JOB: "blue",
    POD: "green",
    SERVICE: "yellow",
    CONFIG_MAP: "magenta",
    SECRET: "magenta",
    PVC: "cyan",
}


class TreePrinter:
    """Render a tree one line per node, depth first.

    With ``use_color`` the ``Kind/name`` label is wrapped in rich console
    markup for the kind's color. :meth:`render_ansi` and :meth:`print_tree` turn
    that markup into ANSI escape sequences.
    """

    def __init__(self, use_color: bool = False) -> None:
        self.use_color = use_color

    def color_for(self, kind: str) -> Optional[str]:
        if not self.use_color:
            return None
        return KIND_COLORS.get(kind)

    def label(self, node: ResourceNode) -> str:
        text = f"{node.kind}/{node.name}"
        color = self.color_for(node.kind)
        if color is None:
            return text
        return f"[{color}]{text}[/{color}]"

    def render(self, root: ResourceNode) -> List[str]:
        lines: List[str] = []
        self._render(root, "", True, lines)
        return lines

    def _render(self, node: ResourceNode, prefix: str, is_last: bool, lines: List[str]) -> None:
        connector = LAST_CONNECTOR if is_last else CONNECTOR
        lines.append(f"{prefix}{connector}{self.label(node)}")
        child_prefix = prefix + (LAST_INDENT if is_last else INDENT)
        for position, child in enumerate(node.children, start=1):
            self._render(child, child_prefix, position == len(node.children), lines)

    def render_ansi(self, root: ResourceNode) -> List[str]:
        """Render the tree with colors applied as ANSI escape sequences."""

        if not self.use_color:
            return self.render(root)
        console = Console(force_terminal=True, color_system="standard", no_color=False, highlight=False)
        lines: List[str] = []
        for line in self.render(root):
            with console.capture() as capture:
                console.print(line, highlight=False, soft_wrap=True, end="")
            lines.append(capture.get())
        return lines

    def print_tree(self, root: ResourceNode, console: Optional[Console] = None) -> None:
        console = console or Console(highlight=False)
        for line in self.render(root):
            console.print(line, markup=self.use_color, highlight=False, soft_wrap=True)
