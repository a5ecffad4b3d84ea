"""Order repository for data access operations."""

from sqlalchemy import delete, update
from sqlmodel import Session, col, select

from src.storefront.entities.core._base import utcnow

from .entity import CustomerInfo, Order, OrderItem, OrderStatus
from .table import OrderItemTable, OrderTable


class OrderRepository:
    """Loads and stores orders together with their item snapshots."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, order_id: str) -> Order | None:
        row = self._session.get(OrderTable, order_id)
        if row is None:
            return None
        return self._to_entity(row)

    def get_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        statement = select(OrderTable).where(
            (OrderTable.user_id == user_id) & (OrderTable.idempotency_key == key)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return self._to_entity(row)

    def list_orders(
        self,
        *,
        user_id: str | None = None,
        statuses: list[OrderStatus] | None = None,
    ) -> list[Order]:
        """Orders newest first, optionally filtered by owner and status."""
        statement = select(OrderTable)
        if user_id is not None:
            statement = statement.where(OrderTable.user_id == user_id)
        if statuses:
            statement = statement.where(
                col(OrderTable.status).in_([str(status) for status in statuses])
            )
        statement = statement.order_by(col(OrderTable.created_at).desc())
        return [self._to_entity(row) for row in self._session.exec(statement).all()]

    def create(self, order: Order) -> Order:
        row = OrderTable(
            id=order.id,
            user_id=order.user_id,
            customer=order.customer.model_dump(),
            payment_method=str(order.payment_method),
            status=str(order.status),
            subtotal=order.subtotal,
            shipping=order.shipping,
            tax=order.tax,
            total=order.total,
            idempotency_key=order.idempotency_key,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        self._session.add(row)
        self._session.flush()

        for position, item in enumerate(order.items):
            self._session.add(
                OrderItemTable(order_id=order.id, position=position, **item.model_dump())
            )
        self._session.flush()
        return order

    def update_status(self, order: Order, expected: OrderStatus) -> bool:
        """Write the status and timestamps of ``order`` if the stored status is ``expected``.

        Returns False when another writer changed the status first.
        """
        statement = (
            update(OrderTable)
            .where(col(OrderTable.id) == order.id)
            .where(col(OrderTable.status) == str(expected))
            .values(
                status=str(order.status),
                delivered_at=order.delivered_at,
                cancelled_at=order.cancelled_at,
                updated_at=utcnow(),
            )
        )
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1

    def delete(self, order_id: str, expected: OrderStatus) -> bool:
        """Remove the order and its items if it is still in status ``expected``."""
        statement = (
            delete(OrderTable)
            .where(col(OrderTable.id) == order_id)
            .where(col(OrderTable.status) == str(expected))
        )
        for line in self._items_for(order_id):
            self._session.delete(line)
        self._session.flush()
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1

    def _items_for(self, order_id: str) -> list[OrderItemTable]:
        statement = (
            select(OrderItemTable)
            .where(OrderItemTable.order_id == order_id)
            .order_by(col(OrderItemTable.position))
        )
        return list(self._session.exec(statement).all())

    def _to_entity(self, row: OrderTable) -> Order:
        items = [
            OrderItem.model_validate(line, from_attributes=True)
            for line in self._items_for(row.id)
        ]
        return Order(
            id=row.id,
            user_id=row.user_id,
            customer=CustomerInfo.model_validate(row.customer),
            items=items,
            payment_method=row.payment_method,
            status=row.status,
            subtotal=row.subtotal,
            shipping=row.shipping,
            tax=row.tax,
            total=row.total,
            idempotency_key=row.idempotency_key,
            delivered_at=row.delivered_at,
            cancelled_at=row.cancelled_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
