"""Item replica: services, parts and inventory items in one table."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing

ITEM_COLUMNS = (
    "organization_id",
    "sku",
    "name",
    "description",
    "item_type",
    "status",
    "selling_price",
    "cost_price",
    "currency",
    "unit",
    "quantity_on_hand",
    "quantity_available",
    "quantity_reserved",
    "quantity_damaged",
    "reorder_level",
    "reorder_quantity",
    "track_inventory",
    "taxable",
    "tax_rate",
)

INVENTORY_KEYS = (
    "quantity_on_hand",
    "quantity_available",
    "quantity_reserved",
    "quantity_damaged",
    "reorder_level",
    "reorder_quantity",
)


@billing.projection
class ItemReplica:
    item_id = Identifier(identifier=True, required=True)
    organization_id = Identifier()
    sku = String(max_length=100)
    name = String(max_length=255)
    description = Text()
    item_type = String(max_length=20)  # service, part, goods
    status = String(max_length=30)
    selling_price = Float(default=0.0)
    cost_price = Float(default=0.0)
    currency = String(max_length=3)
    unit = String(max_length=20)
    quantity_on_hand = Float(default=0.0)
    quantity_available = Float(default=0.0)
    quantity_reserved = Float(default=0.0)
    quantity_damaged = Float(default=0.0)
    reorder_level = Float(default=0.0)
    reorder_quantity = Float(default=0.0)
    track_inventory = Boolean(default=False)
    taxable = Boolean(default=False)
    tax_rate = Float(default=0.0)
    updated_at = DateTime()


def normalize_item_type(value: str | None) -> str:
    """Keep "service" and "goods"; everything else is stocked as a part."""
    if value in ("service", "goods"):
        return value
    return "part"


def _number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def sales_fields(sales_info: dict | None) -> dict:
    """Pull the replica columns out of an item's ``sales_info`` blob."""
    if not sales_info:
        return {}
    fields = {}
    price = _number(sales_info.get("selling_price"))
    if price is None:
        price = _number(sales_info.get("rate"))
    if price is not None:
        fields["selling_price"] = price
    if isinstance(sales_info.get("selling_currency"), str):
        fields["currency"] = sales_info["selling_currency"]
    if isinstance(sales_info.get("description"), str):
        fields["description"] = sales_info["description"]
    if isinstance(sales_info.get("taxable"), bool):
        fields["taxable"] = sales_info["taxable"]
    if _number(sales_info.get("tax_rate")) is not None:
        fields["tax_rate"] = _number(sales_info["tax_rate"])
    return fields


def purchase_fields(purchase_info: dict | None) -> dict:
    if not purchase_info:
        return {}
    fields = {}
    if _number(purchase_info.get("cost_price")) is not None:
        fields["cost_price"] = _number(purchase_info["cost_price"])
    if isinstance(purchase_info.get("cost_currency"), str):
        fields["cost_currency"] = purchase_info["cost_currency"]
    return fields


def inventory_fields(inventory_info: dict | None) -> dict:
    if not inventory_info:
        return {}
    fields = {key: _number(inventory_info.get(key)) for key in INVENTORY_KEYS}
    fields = {key: value for key, value in fields.items() if value is not None}
    if isinstance(inventory_info.get("track_inventory"), bool):
        fields["track_inventory"] = inventory_info["track_inventory"]
    return fields


def upsert_item(item_id: str, values: dict, occurred_at: datetime | None = None) -> ItemReplica:
    """Insert the replica or overwrite every column of an existing one."""
    repo = current_domain.repository_for(ItemReplica)
    try:
        record = repo.get(str(item_id))
    except ObjectNotFoundError:
        record = ItemReplica(item_id=str(item_id))

    for column in ITEM_COLUMNS:
        value = values.get(column)
        if value is None and column in ("track_inventory", "taxable"):
            value = False
        elif value is None and column in ("selling_price", "cost_price", "tax_rate", *INVENTORY_KEYS):
            value = 0.0
        setattr(record, column, value)
    if occurred_at is not None or record.updated_at is None:
        record.updated_at = occurred_at or datetime.now(UTC)
    repo.add(record)
    return record


def find_item(item_id: str) -> ItemReplica | None:
    try:
        return current_domain.repository_for(ItemReplica).get(str(item_id))
    except ObjectNotFoundError:
        return None
