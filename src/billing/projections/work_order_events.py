"""Inbound cross-domain event handler: Billing mirrors field-service work orders."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.work_order import WorkOrderCreated, WorkOrderDeleted, WorkOrderUpdated

from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.projections.work_order_replica import WorkOrderReplica

logger = structlog.get_logger(__name__)

billing.register_external_event(WorkOrderCreated, "FieldService.WorkOrderCreated.v1")
billing.register_external_event(WorkOrderUpdated, "FieldService.WorkOrderUpdated.v1")
billing.register_external_event(WorkOrderDeleted, "FieldService.WorkOrderDeleted.v1")


@billing.event_handler(part_of=Invoice, stream_category="field_service::work_order")
class WorkOrderReplicaEventHandler:
    @handle(WorkOrderCreated)
    def on_work_order_created(self, event: WorkOrderCreated) -> None:
        repo = current_domain.repository_for(WorkOrderReplica)
        try:
            record = repo.get(str(event.work_order_id))
        except ObjectNotFoundError:
            record = WorkOrderReplica(work_order_id=str(event.work_order_id))

        record.organization_id = event.organization_id
        record.summary = event.summary
        record.status = event.status
        record.billing_status = event.billing_status
        record.customer_id = event.customer_id
        record.contact_id = event.contact_id
        record.grand_total = event.grand_total or 0.0
        record.updated_at = event.occurred_at
        repo.add(record)

    @handle(WorkOrderUpdated)
    def on_work_order_updated(self, event: WorkOrderUpdated) -> None:
        repo = current_domain.repository_for(WorkOrderReplica)
        try:
            record = repo.get(str(event.work_order_id))
        except ObjectNotFoundError:
            logger.warning("Update for unknown work order replica skipped", work_order_id=str(event.work_order_id))
            return

        for field in ("summary", "status", "billing_status"):
            value = getattr(event, field)
            if value:
                setattr(record, field, value)
        if (event.grand_total or 0.0) > 0:
            record.grand_total = event.grand_total
        if event.occurred_at:
            record.updated_at = event.occurred_at
        repo.add(record)

    @handle(WorkOrderDeleted)
    def on_work_order_deleted(self, event: WorkOrderDeleted) -> None:
        repo = current_domain.repository_for(WorkOrderReplica)
        try:
            repo._dao.delete(repo.get(str(event.work_order_id)))
        except ObjectNotFoundError:
            pass  # Already removed or never replicated
