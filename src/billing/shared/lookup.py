"""Repository lookups that treat soft-deleted records as missing."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain


def load_active(aggregate_cls, identifier):
    """Fetch an aggregate by id, raising ObjectNotFoundError for tombstones too."""
    record = current_domain.repository_for(aggregate_cls).get(identifier)
    if getattr(record, "deleted_at", None) is not None:
        raise ObjectNotFoundError(f"`{aggregate_cls.__name__}` object with identifier {identifier} does not exist.")
    return record


def list_active(aggregate_cls, **filters) -> list:
    """All live records matching ``filters``, oldest first."""
    records = current_domain.repository_for(aggregate_cls)._dao.query.filter(**filters).all().items
    live = [record for record in records if getattr(record, "deleted_at", None) is None]
    return sorted(live, key=lambda record: record.created_at)
