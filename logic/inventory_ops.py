"""logic/inventory_ops.py — Canonical inventory item operations.

Every place that reads or withdraws repair packs (the resource pool,
the container locator, the sandbox HUD) goes through these helpers so
item bookkeeping stays in one spot.

Public API
----------
``count_item``    — how many of *item_id* an inventory holds
``remove_item``   — withdraw up to *count*, return how many were taken
``add_item``      — deposit *count* of *item_id*
"""

from __future__ import annotations


def count_item(inv, item_id: str) -> int:
    """Return the stack size of *item_id* in *inv* (0 if absent)."""
    if inv is None:
        return 0
    return max(0, int(inv.items.get(item_id, 0)))


def remove_item(inv, item_id: str, count: int) -> int:
    """Withdraw up to *count* of *item_id*.  Delete the key at zero.

    Returns the number actually removed, which is less than *count*
    when the stack is short.
    """
    if inv is None or count <= 0:
        return 0
    have = count_item(inv, item_id)
    taken = min(have, int(count))
    if taken <= 0:
        return 0
    left = have - taken
    if left > 0:
        inv.items[item_id] = left
    else:
        inv.items.pop(item_id, None)
    return taken


def add_item(inv, item_id: str, count: int = 1) -> None:
    if count <= 0:
        return
    inv.items[item_id] = inv.items.get(item_id, 0) + count
