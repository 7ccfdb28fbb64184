"""Billing bounded context: invoices, payments, sales orders and returns.

Owns the settlement lifecycle (invoice numbering, payment application,
balance recomputation) and keeps eventually-consistent replicas of the
customer, contact, item and work-order data published by upstream services.
"""

from protean.domain import Domain

from billing.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging(log_file_prefix="billing")

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
billing = Domain(name="billing")
