"""Append-only audit trail for invoice and payment activity."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String, Text

from billing.domain import billing


@billing.aggregate
class AuditEntry:
    organization_id = Identifier()
    entity_type = String(required=True, max_length=50)
    entity_id = Identifier(required=True)
    action = String(required=True, max_length=50)
    old_status = String(max_length=30)
    new_status = String(max_length=30)
    notes = Text()
    performed_by = String(max_length=100, default="System")
    created_at = DateTime()

    @classmethod
    def record(cls, entity_type, entity_id, action, organization_id=None, old_status=None, new_status=None, notes=None, performed_by="System"):
        return cls(
            organization_id=organization_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
            performed_by=performed_by,
            created_at=datetime.now(UTC),
        )
