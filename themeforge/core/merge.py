"""Precedence merge over JSON-shaped trees.

Merge rules, applied per node, later layer over earlier layer:

- mapping over mapping: merge key by key, recursively;
- anything else (scalar, array, ``None``, or a type mismatch): the later
  value replaces the earlier one wholesale. Arrays are never merged
  element-wise.

Inputs are never mutated; the result shares no containers with them.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from themeforge.errors import PreconditionError


def merge_two(base: Any, overlay: Any) -> Any:
    if isinstance(base, Mapping) and isinstance(overlay, Mapping):
        merged = {key: copy.deepcopy(value) for key, value in base.items()}
        for key, value in overlay.items():
            merged[key] = merge_two(merged[key], value) if key in merged else copy.deepcopy(value)
        return merged
    return copy.deepcopy(overlay)


def deep_merge(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge *layers* left to right; later layers take precedence.

    ``None`` layers are skipped, so optional tiers can be passed directly.
    """
    result: dict[str, Any] = {}
    for layer in layers:
        if layer is None:
            continue
        result = merge_two(result, layer)
    return result


def load_json_document(path: Path) -> dict[str, Any]:
    """Load a settings document. Only ``.json`` files are supported."""
    if path.suffix != ".json":
        raise PreconditionError(
            f"Settings files must be JSON documents, got {path.name}"
        )
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PreconditionError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise PreconditionError(f"{path} must contain a JSON object")
    return data


def tenant_layers(document: Mapping[str, Any], project_name: str) -> tuple[dict, dict]:
    """Split a ``{defaultSettings, appsSettings}`` document into its two tiers."""
    defaults = document.get("defaultSettings") or {}
    per_app = (document.get("appsSettings") or {}).get(project_name) or {}
    return dict(defaults), dict(per_app)
