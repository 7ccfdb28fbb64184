"""Inbound cross-domain event handlers: Billing mirrors the item catalog.

Services and parts arrive as full snapshots and are always upserted. Items
from the inventory service are upserted on create, patched on update and
removed on delete.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.catalog import (
    ItemCreated,
    ItemDeleted,
    ItemUpdated,
    PartCreated,
    PartUpdated,
    ServiceCreated,
    ServiceUpdated,
)

from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.projections.item_replica import (
    ItemReplica,
    inventory_fields,
    normalize_item_type,
    purchase_fields,
    sales_fields,
    upsert_item,
)
from billing.shared.payload import parse_json, patch_selector

logger = structlog.get_logger(__name__)

billing.register_external_event(ServiceCreated, "FieldService.ServiceCreated.v1")
billing.register_external_event(ServiceUpdated, "FieldService.ServiceUpdated.v1")
billing.register_external_event(PartCreated, "FieldService.PartCreated.v1")
billing.register_external_event(PartUpdated, "FieldService.PartUpdated.v1")
billing.register_external_event(ItemCreated, "Inventory.ItemCreated.v1")
billing.register_external_event(ItemUpdated, "Inventory.ItemUpdated.v1")
billing.register_external_event(ItemDeleted, "Inventory.ItemDeleted.v1")


@billing.event_handler(part_of=Invoice, stream_category="field_service::service")
class ServiceReplicaEventHandler:
    def _upsert(self, event) -> None:
        upsert_item(
            event.service_id,
            {
                "organization_id": event.organization_id,
                "name": event.name,
                "description": event.description,
                "item_type": "service",
                "status": event.status,
                "selling_price": event.base_price,
            },
            occurred_at=event.occurred_at,
        )

    @handle(ServiceCreated)
    def on_service_created(self, event: ServiceCreated) -> None:
        self._upsert(event)

    @handle(ServiceUpdated)
    def on_service_updated(self, event: ServiceUpdated) -> None:
        self._upsert(event)


@billing.event_handler(part_of=Invoice, stream_category="field_service::part")
class PartReplicaEventHandler:
    def _upsert(self, event) -> None:
        upsert_item(
            event.part_id,
            {
                "organization_id": event.organization_id,
                "sku": event.part_number,
                "name": event.name,
                "description": event.description,
                "item_type": "part",
                "status": event.status,
                "selling_price": event.unit_price,
            },
            occurred_at=event.occurred_at,
        )

    @handle(PartCreated)
    def on_part_created(self, event: PartCreated) -> None:
        self._upsert(event)

    @handle(PartUpdated)
    def on_part_updated(self, event: PartUpdated) -> None:
        self._upsert(event)


@billing.event_handler(part_of=Invoice, stream_category="inventory::item")
class ItemReplicaEventHandler:
    @handle(ItemCreated)
    def on_item_created(self, event: ItemCreated) -> None:
        sales = sales_fields(parse_json(event.sales_info, default={}))
        purchase = purchase_fields(parse_json(event.purchase_info, default={}))
        stock = inventory_fields(parse_json(event.inventory_info, default={}))

        values = {
            "organization_id": event.organization_id,
            "sku": event.sku,
            "name": event.name,
            "item_type": normalize_item_type(event.type),
            "status": event.status,
            **stock,
            **sales,
        }
        if "cost_price" in purchase:
            values["cost_price"] = purchase["cost_price"]
        if not values.get("currency") and purchase.get("cost_currency"):
            values["currency"] = purchase["cost_currency"]

        logger.info("Replicating item", item_id=str(event.item_id), item_type=values["item_type"])
        upsert_item(event.item_id, values, occurred_at=event.occurred_at)

    @handle(ItemUpdated)
    def on_item_updated(self, event: ItemUpdated) -> None:
        repo = current_domain.repository_for(ItemReplica)
        try:
            record = repo.get(str(event.item_id))
        except ObjectNotFoundError:
            logger.warning("Update for unknown item replica skipped", item_id=str(event.item_id))
            return

        should_apply = patch_selector(event.updated_fields)
        for field in ("name", "sku", "status"):
            value = getattr(event, field)
            if should_apply(field, value):
                setattr(record, field, value)
        if should_apply("type", event.type):
            record.item_type = normalize_item_type(event.type)

        updates = {}
        updates.update(sales_fields(parse_json(event.sales_info, default={})))
        purchase = purchase_fields(parse_json(event.purchase_info, default={}))
        if "cost_price" in purchase:
            updates["cost_price"] = purchase["cost_price"]
        if "currency" not in updates and purchase.get("cost_currency"):
            updates["currency"] = purchase["cost_currency"]
        updates.update(inventory_fields(parse_json(event.inventory_info, default={})))
        for column, value in updates.items():
            setattr(record, column, value)

        if event.occurred_at:
            record.updated_at = event.occurred_at
        repo.add(record)

    @handle(ItemDeleted)
    def on_item_deleted(self, event: ItemDeleted) -> None:
        repo = current_domain.repository_for(ItemReplica)
        try:
            record = repo.get(str(event.item_id))
            repo._dao.delete(record)
            logger.info("Item replica removed", item_id=str(event.item_id))
        except ObjectNotFoundError:
            pass  # Already removed or never replicated
