"""Application tests for the item and work-order replica handlers.

Covers:
- services and parts: snapshot upserts with their item type
- inventory items: JSON blob extraction, type normalization, patching, deletion
- work orders: create, partial update, delete
"""

import json

import pytest
from billing.projections.catalog_events import (
    ItemReplicaEventHandler,
    PartReplicaEventHandler,
    ServiceReplicaEventHandler,
)
from billing.projections.item_replica import ItemReplica
from billing.projections.queries import get_item, list_items
from billing.projections.work_order_events import WorkOrderReplicaEventHandler
from billing.projections.work_order_replica import WorkOrderReplica
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from shared.events.catalog import (
    ItemCreated,
    ItemDeleted,
    ItemUpdated,
    PartCreated,
    ServiceCreated,
    ServiceUpdated,
)
from shared.events.work_order import WorkOrderCreated, WorkOrderDeleted, WorkOrderUpdated


def _item(item_id):
    return current_domain.repository_for(ItemReplica).get(item_id)


class TestServiceAndPartEvents:
    def test_service_is_replicated_as_service(self):
        ServiceReplicaEventHandler().on_service_created(
            ServiceCreated(service_id="svc-1", organization_id="org-001", name="Inspection", base_price=80.0)
        )
        record = _item("svc-1")
        assert record.item_type == "service"
        assert record.selling_price == 80.0

    def test_service_update_overwrites_snapshot(self):
        handler = ServiceReplicaEventHandler()
        handler.on_service_created(
            ServiceCreated(service_id="svc-1", organization_id="org-001", name="Inspection", base_price=80.0)
        )
        handler.on_service_updated(
            ServiceUpdated(service_id="svc-1", organization_id="org-001", name="Full Inspection", base_price=95.0)
        )
        record = _item("svc-1")
        assert record.name == "Full Inspection"
        assert record.selling_price == 95.0

    def test_part_keeps_part_number_as_sku(self):
        PartReplicaEventHandler().on_part_created(
            PartCreated(part_id="prt-1", organization_id="org-001", part_number="PN-42", name="Gasket", unit_price=3.5)
        )
        record = _item("prt-1")
        assert record.item_type == "part"
        assert record.sku == "PN-42"


class TestInventoryItemEvents:
    def _create(self, **overrides):
        payload = {
            "item_id": "itm-1",
            "organization_id": "org-001",
            "sku": "SKU-1",
            "name": "Oil Filter",
            "type": "goods",
            "sales_info": json.dumps({"selling_price": 12.5, "selling_currency": "INR", "taxable": True}),
            "purchase_info": json.dumps({"cost_price": 8.0}),
            "inventory_info": json.dumps({"quantity_on_hand": 40, "track_inventory": True}),
        }
        payload.update(overrides)
        ItemReplicaEventHandler().on_item_created(ItemCreated(**payload))

    def test_blobs_are_unpacked_into_columns(self):
        self._create()
        record = _item("itm-1")
        assert record.selling_price == 12.5
        assert record.currency == "INR"
        assert record.cost_price == 8.0
        assert record.quantity_on_hand == 40.0
        assert record.track_inventory is True
        assert record.taxable is True

    def test_rate_is_used_when_selling_price_missing(self):
        self._create(sales_info=json.dumps({"rate": 9.0}))
        assert _item("itm-1").selling_price == 9.0

    @pytest.mark.parametrize(
        "raw_type, expected",
        [("service", "service"), ("goods", "goods"), ("bundle", "part"), (None, "part")],
    )
    def test_item_type_is_normalized(self, raw_type, expected):
        self._create(type=raw_type)
        assert _item("itm-1").item_type == expected

    def test_update_patches_sent_fields(self):
        self._create()
        ItemReplicaEventHandler().on_item_updated(
            ItemUpdated(item_id="itm-1", name="Oil Filter XL", inventory_info=json.dumps({"quantity_on_hand": 35}))
        )
        record = _item("itm-1")
        assert record.name == "Oil Filter XL"
        assert record.quantity_on_hand == 35.0
        assert record.selling_price == 12.5
        assert record.sku == "SKU-1"

    def test_redelivery_without_event_time_leaves_row_unchanged(self):
        self._create()
        first = _item("itm-1").to_dict()

        self._create()

        assert _item("itm-1").to_dict() == first
        assert len(list_items("org-001")) == 1

    def test_update_for_unknown_item_is_skipped(self):
        ItemReplicaEventHandler().on_item_updated(ItemUpdated(item_id="itm-missing", name="Ghost"))
        with pytest.raises(ObjectNotFoundError):
            _item("itm-missing")

    def test_delete_removes_row_and_is_repeatable(self):
        self._create()
        handler = ItemReplicaEventHandler()
        handler.on_item_deleted(ItemDeleted(item_id="itm-1"))
        handler.on_item_deleted(ItemDeleted(item_id="itm-1"))
        with pytest.raises(ObjectNotFoundError):
            _item("itm-1")

    def test_read_model_queries_filter_by_type(self):
        self._create()
        ServiceReplicaEventHandler().on_service_created(
            ServiceCreated(service_id="svc-1", organization_id="org-001", name="Inspection")
        )
        assert [row["id"] for row in list_items("org-001", item_type="goods")] == ["itm-1"]
        assert len(list_items("org-001")) == 2
        assert get_item("svc-1")["name"] == "Inspection"


class TestWorkOrderEvents:
    def test_created_updated_deleted(self):
        handler = WorkOrderReplicaEventHandler()
        handler.on_work_order_created(
            WorkOrderCreated(
                work_order_id="wo-1",
                organization_id="org-001",
                summary="AC service",
                status="open",
                grand_total=150.0,
            )
        )
        handler.on_work_order_updated(WorkOrderUpdated(work_order_id="wo-1", status="completed"))

        record = current_domain.repository_for(WorkOrderReplica).get("wo-1")
        assert record.status == "completed"
        assert record.summary == "AC service"
        assert record.grand_total == 150.0

        handler.on_work_order_deleted(WorkOrderDeleted(work_order_id="wo-1"))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(WorkOrderReplica).get("wo-1")

    def test_update_for_unknown_work_order_is_skipped(self):
        WorkOrderReplicaEventHandler().on_work_order_updated(WorkOrderUpdated(work_order_id="wo-x", status="done"))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(WorkOrderReplica).get("wo-x")
