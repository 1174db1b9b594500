"""Utilities for rendering the project tree in the CLI."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


def render_tree(objects: List[Dict[str, Any]]) -> str:
    """Render a flat system-object listing as an ASCII forest.

    Args:
        objects: Dicts with ``id``, ``parent_id``, ``name``, ``type`` (and
            optionally ``virtual``), as returned by the tree listing.

    Returns:
        String representation of the tree.  Objects whose parent is not in
        the listing are shown as roots.
    """
    ids = {o["id"] for o in objects}
    children: Dict[Optional[int], List[Dict[str, Any]]] = {}
    for obj in objects:
        parent = obj.get("parent_id")
        key = parent if parent in ids else None
        children.setdefault(key, []).append(obj)

    lines: List[str] = []
    visited: set[int] = set()

    def _render(obj: Dict[str, Any], prefix: str, is_last: bool, is_root: bool) -> None:
        # Guards against parent cycles written by hand-edited data.
        if obj["id"] in visited:
            return
        visited.add(obj["id"])

        label = f"{_get_icon(obj.get('type', ''))} {obj.get('name')} [{obj.get('type')}]"
        if obj.get("virtual"):
            label += " (virtual)"

        if is_root:
            lines.append(label)
            child_prefix = ""
        else:
            connector = "└── " if is_last else "├── "
            lines.append(f"{prefix}{connector}{label}")
            child_prefix = prefix + ("    " if is_last else "│   ")

        kids = children.get(obj["id"], [])
        for i, child in enumerate(kids):
            _render(child, child_prefix, i == len(kids) - 1, False)

    for root in children.get(None, []):
        _render(root, "", True, True)

    return "\n".join(lines)


def _get_icon(object_type: str) -> str:
    lowered = (object_type or "").lower()
    if "graphic" in lowered:
        return "🖥️"
    if "value" in lowered:
        return "🔢"
    icons = {
        "folder": "📁",
        "script": "📜",
    }
    return icons.get(lowered, "📦")
