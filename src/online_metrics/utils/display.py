"""Plain-text tree rendering of metric values and their auxiliary state."""

from __future__ import annotations

from torch import Tensor


def format_value(value) -> str:
    if isinstance(value, Tensor):
        value = value.item() if value.dim() == 0 else value.tolist()
    if isinstance(value, float):
        return f"{value:.4f}"
    return str(value)


def format_tree(name: str, value, params: dict | None = None, children: list | None = None) -> str:
    """Render ``name: value`` followed by its params and child subtrees.

    ``children`` holds already-rendered subtrees (strings); they are
    indented under the root after the params.

    Example:
        accuracy: 0.7500
        ├── correct: 3
        └── total: 4
    """
    header = name if value is None else f"{name}: {format_value(value)}"
    branches = [f"{k}: {format_value(v)}" for k, v in (params or {}).items()]
    branches += list(children or [])

    lines = [header]
    for i, branch in enumerate(branches):
        last = i == len(branches) - 1
        first_line, *rest = branch.split("\n")
        lines.append(("└── " if last else "├── ") + first_line)
        pad = "    " if last else "│   "
        lines.extend(pad + line for line in rest)
    return "\n".join(lines)
