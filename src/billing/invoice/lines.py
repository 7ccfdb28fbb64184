"""Line-item resolution against the item replica.

Names and types come from the replica when the item is known. When it is
not (the item may simply not have replicated yet) the caller's values are
used instead of rejecting the document.
"""

import structlog
from protean.exceptions import ValidationError

from billing.projections.item_replica import find_item

logger = structlog.get_logger(__name__)


def resolve_item_lines(items_data: list[dict] | None, default_type: str = "service") -> list[dict]:
    if not items_data:
        raise ValidationError({"items": ["at least one item is required"]})

    missing = [
        f"item {index}: item_id is required"
        for index, data in enumerate(items_data, start=1)
        if not data.get("item_id")
    ]
    if missing:
        raise ValidationError({"items": missing})

    resolved = []
    for data in items_data:
        line = dict(data)
        item_id = str(line["item_id"])
        replica = find_item(item_id)
        if replica is None:
            logger.info("Item not in read model, using caller values", item_id=item_id)

        line["name"] = (replica.name if replica else None) or line.get("name") or f"Item {item_id[:8]}"
        line["item_type"] = (replica.item_type if replica else None) or line.get("item_type") or default_type
        resolved.append(line)
    return resolved
