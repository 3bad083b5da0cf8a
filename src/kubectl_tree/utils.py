"""Utility helpers shared across the kubectl-tree package."""
from __future__ import annotations

from typing import Dict, Mapping, Optional


def merged_labels(*label_maps: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Merge label maps left to right without mutating the inputs."""

    merged: Dict[str, str] = {}
    for labels in label_maps:
        if labels:
            merged.update(labels)
    return merged


def selector_matches(selector: Optional[Mapping[str, str]], labels: Optional[Mapping[str, str]]) -> bool:
    """Return True when every selector pair is present in ``labels``.

    An empty or missing selector never matches anything.
    """

    if not selector:
        return False
    labels = labels or {}
    for key, value in selector.items():
        if key not in labels or labels[key] != value:
            return False
    return True
