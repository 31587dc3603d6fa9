"""Storefront domain: accounts, catalogue, carts, orders and payments.

A single domain so that order placement can read the cart, decrement product
stock, and persist the order inside one unit of work.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
