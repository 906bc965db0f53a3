"""Ordering bounded context: Order Review & Confirmation.

Handles the order request lifecycle (CQRS): buyer submission from the cart,
staff review of each line, buyer reconciliation over the message thread,
confirmation and payment dispatch.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
