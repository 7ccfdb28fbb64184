"""Cross-domain event contracts for catalog events (services, parts, items).

Services and parts come from the field-service catalog and are always sent
as full snapshots. Items come from the inventory service; their pricing,
purchasing and stock details travel as JSON blobs (``sales_info``,
``purchase_info``, ``inventory_info``).
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String, Text


class ServiceCreated(BaseEvent):
    """A billable service was added to the catalog."""

    __version__ = 1

    service_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    name = String(required=True)
    description = Text()
    status = String()
    base_price = Float(default=0.0)
    occurred_at = DateTime()


class ServiceUpdated(BaseEvent):
    """A catalog service changed; carries the full snapshot."""

    __version__ = 1

    service_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    name = String(required=True)
    description = Text()
    status = String()
    base_price = Float(default=0.0)
    occurred_at = DateTime()


class PartCreated(BaseEvent):
    """A part was added to the catalog."""

    __version__ = 1

    part_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    part_number = String()
    name = String(required=True)
    description = Text()
    status = String()
    unit_price = Float(default=0.0)
    occurred_at = DateTime()


class PartUpdated(BaseEvent):
    """A catalog part changed; carries the full snapshot."""

    __version__ = 1

    part_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    part_number = String()
    name = String(required=True)
    description = Text()
    status = String()
    unit_price = Float(default=0.0)
    occurred_at = DateTime()


class ItemCreated(BaseEvent):
    """An inventory item was created."""

    __version__ = 1

    item_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    sku = String()
    name = String(required=True)
    type = String()  # service, goods; anything else is a part
    status = String()
    sales_info = Text()  # JSON
    purchase_info = Text()  # JSON
    inventory_info = Text()  # JSON
    occurred_at = DateTime()


class ItemUpdated(BaseEvent):
    """One or more inventory item fields changed."""

    __version__ = 1

    item_id = Identifier(required=True)
    organization_id = Identifier()
    sku = String()
    name = String()
    type = String()
    status = String()
    sales_info = Text()  # JSON
    purchase_info = Text()  # JSON
    inventory_info = Text()  # JSON
    updated_fields = Text()  # JSON: list of field names
    occurred_at = DateTime()


class ItemDeleted(BaseEvent):
    """An inventory item was deleted."""

    __version__ = 1

    item_id = Identifier(required=True)
    organization_id = Identifier()
    occurred_at = DateTime()
