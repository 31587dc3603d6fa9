from storefront.domain import storefront
from storefront.order.order import OPEN_STATES, Order, OrderStatus


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number: str) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all().items
        return results[0] if results else None

    def for_account(self, account_id=None, status=None, page=1, limit=10):
        """Newest-first page of orders, optionally for one account. Returns ``(orders, total)``."""
        query = self._dao.query
        if account_id:
            query = query.filter(account_id=account_id)
        if status:
            query = query.filter(status=status)
        results = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return results.items, results.total

    def has_open_orders_for_account(self, account_id: str) -> bool:
        return bool(
            self._dao.query.filter(account_id=account_id, status__in=list(OPEN_STATES)).limit(1).all().items
        )

    def has_open_order_for_product(self, product_id: str) -> bool:
        open_orders = self._dao.query.filter(status__in=list(OPEN_STATES)).all().items
        return any(str(line.product_id) == product_id for order in open_orders for line in order.items)

    def has_delivered_order_with_product(self, account_id: str, product_id: str) -> bool:
        delivered = self._dao.query.filter(account_id=account_id, status=OrderStatus.DELIVERED.value).all().items
        return any(str(line.product_id) == product_id for order in delivered for line in order.items)
