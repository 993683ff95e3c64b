"""core/tuning.py — Data-driven tuning constants.

Every bot number (step distance, search radius, pack value, cadence …)
lives in ``data/tuning.toml`` and is loaded once at startup.  Any system
reads a value with::

    from core.tuning import get
    step = get("bots.movement", "step_distance", 0.8)

The default passed to ``get()`` is always the shipped value, so code
behaves the same when the file is missing.

Hot-reload: call ``reload()`` to re-read the file.  In the sandbox,
press F4.
"""

from __future__ import annotations
import tomllib
from pathlib import Path


_data: dict = {}
_path: Path | None = None


def load(path: str | Path | None = None) -> None:
    """Load (or reload) tuning constants from *path*.

    If *path* is ``None``, default to ``data/tuning.toml`` relative to
    the project root (one level above ``core/``).
    """
    global _data, _path

    if path is None:
        root = Path(__file__).resolve().parent.parent
        path = root / "data" / "tuning.toml"
    else:
        path = Path(path)

    _path = path

    if not path.exists():
        print(f"[TUNING] {path} not found — using defaults")
        _data = {}
        return

    with open(path, "rb") as f:
        _data = tomllib.load(f)

    count = _count_leaves(_data)
    print(f"[TUNING] Loaded {count} values from {path}")


def reload() -> None:
    """Re-read the tuning file from disk (hot-reload)."""
    load(_path)


def reset() -> None:
    """Forget every loaded value so ``get()`` falls back to defaults."""
    global _data
    _data = {}


def get(section: str, key: str, default=None):
    """Read a tuning value.

    *section* uses dot-notation to traverse nested tables, e.g.
    ``"bots.repair"`` looks up ``[bots.repair]``.

    >>> get("bots.repair", "update_interval", 30)
    30
    """
    node = _data
    for part in section.split("."):
        if isinstance(node, dict):
            node = node.get(part)
        else:
            return default
        if node is None:
            return default
    if isinstance(node, dict):
        return node.get(key, default)
    return default


def section(section_path: str) -> dict:
    """Return an entire section dict (shallow copy), or empty dict."""
    node = _data
    for part in section_path.split("."):
        if isinstance(node, dict):
            node = node.get(part)
        else:
            return {}
        if node is None:
            return {}
    if isinstance(node, dict):
        return dict(node)
    return {}


def override(section_path: str, key: str, value) -> None:
    """Set a single value in memory, creating tables as needed.

    Not persisted; a ``reload()`` restores the file's value.
    """
    node = _data
    for part in section_path.split("."):
        node = node.setdefault(part, {})
    node[key] = value


def _count_leaves(d: dict, _n: int = 0) -> int:
    for v in d.values():
        if isinstance(v, dict):
            _n = _count_leaves(v, _n)
        else:
            _n += 1
    return _n
