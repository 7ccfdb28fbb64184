"""Read-model queries over the customer, contact and item replicas.

List queries take an optional ``q``: a case-insensitive substring matched
against the columns a person would search by (names, email, phone, SKU).
"""

from protean.utils.globals import current_domain

from billing.projections.customer_replica import CUSTOMER_COLUMNS, ContactReplica, CustomerReplica
from billing.projections.item_replica import ITEM_COLUMNS, ItemReplica

CUSTOMER_SEARCH_COLUMNS = ("display_name", "company_name", "email", "phone")
CONTACT_SEARCH_COLUMNS = ("first_name", "last_name", "email", "phone", "mobile")
ITEM_SEARCH_COLUMNS = ("name", "sku", "description")


def _matches(record, columns: tuple, q: str | None) -> bool:
    if not q or not q.strip():
        return True
    needle = q.strip().lower()
    return any(needle in (getattr(record, column) or "").lower() for column in columns)


def _replicas(projection_cls, **filters) -> list:
    return current_domain.repository_for(projection_cls)._dao.query.filter(**filters).all().items


def _customer_to_dict(record: CustomerReplica) -> dict:
    data = {"id": str(record.customer_id)}
    data.update({column: getattr(record, column) for column in CUSTOMER_COLUMNS})
    data["updated_at"] = record.updated_at
    return data


def _contact_to_dict(record: ContactReplica) -> dict:
    return {
        "id": str(record.contact_id),
        "organization_id": record.organization_id,
        "customer_id": record.customer_id,
        "first_name": record.first_name,
        "last_name": record.last_name,
        "full_name": record.full_name,
        "email": record.email,
        "phone": record.phone,
        "mobile": record.mobile,
        "is_primary": record.is_primary,
        "updated_at": record.updated_at,
    }


def _item_to_dict(record: ItemReplica) -> dict:
    data = {"id": str(record.item_id)}
    data.update({column: getattr(record, column) for column in ITEM_COLUMNS})
    data["updated_at"] = record.updated_at
    return data


def list_customers(organization_id: str, q: str | None = None) -> list[dict]:
    records = [
        record
        for record in _replicas(CustomerReplica, organization_id=organization_id)
        if _matches(record, CUSTOMER_SEARCH_COLUMNS, q)
    ]
    return sorted((_customer_to_dict(record) for record in records), key=lambda row: row["display_name"] or "")


def get_customer(customer_id: str) -> dict:
    return _customer_to_dict(current_domain.repository_for(CustomerReplica).get(customer_id))


def list_contacts(organization_id: str, q: str | None = None, customer_id: str | None = None) -> list[dict]:
    filters = {"organization_id": organization_id}
    if customer_id:
        filters["customer_id"] = customer_id
    records = [
        record
        for record in _replicas(ContactReplica, **filters)
        if _matches(record, CONTACT_SEARCH_COLUMNS, q) or (q and q.strip().lower() in record.full_name.lower())
    ]
    # Primary contacts first, then by name
    return [
        _contact_to_dict(record)
        for record in sorted(records, key=lambda record: (not record.is_primary, record.full_name.lower()))
    ]


def list_items(organization_id: str, item_type: str | None = None, q: str | None = None) -> list[dict]:
    filters = {"organization_id": organization_id}
    if item_type:
        filters["item_type"] = item_type
    records = [record for record in _replicas(ItemReplica, **filters) if _matches(record, ITEM_SEARCH_COLUMNS, q)]
    return sorted((_item_to_dict(record) for record in records), key=lambda row: row["name"] or "")


def get_item(item_id: str) -> dict:
    return _item_to_dict(current_domain.repository_for(ItemReplica).get(item_id))
