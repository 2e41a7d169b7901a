# backend/services/orders.py
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from models.order import Order, OrderStatus
from models.users import User
from utils.errors import Forbidden, NotFound, ValidationError

logger = logging.getLogger(__name__)

ORDER_STATUSES = {s.value for s in OrderStatus}


def _query(db: Session):
    return db.query(Order).options(joinedload(Order.items), joinedload(Order.user))


def _get_order(db: Session, order_id: int) -> Order:
    order = _query(db).filter(Order.id == order_id).first()
    if not order:
        raise NotFound("Order not found.")
    return order


def _is_owner_or_admin(order: Order, actor: User) -> bool:
    return order.user_id == actor.id or actor.is_admin


def get_order_for(db: Session, order_id: int, actor: User) -> Order:
    order = _get_order(db, order_id)
    if not _is_owner_or_admin(order, actor):
        raise Forbidden("Not authorized to view this order.")
    return order


def list_user_orders(db: Session, user_id: int) -> List[Order]:
    return _query(db).filter(Order.user_id == user_id).order_by(Order.created_at.desc(), Order.id.desc()).all()


def list_all_orders(db: Session) -> List[Order]:
    return _query(db).order_by(Order.created_at.desc(), Order.id.desc()).all()


def mark_paid(db: Session, order_id: int, actor: User, transaction_id: Optional[str] = None,
              payment_status: Optional[str] = None) -> Order:
    order = _get_order(db, order_id)
    if not _is_owner_or_admin(order, actor):
        raise Forbidden("Not authorized to update payment for this order.")

    order.payment_method = order.payment_method or "mock"
    order.payment_transaction_id = transaction_id or f"mock_{order.id}"
    order.payment_status = payment_status or "COMPLETED"
    order.paid_at = datetime.now(timezone.utc)

    # Paying a pending order is the only automatic status change
    if order.status == OrderStatus.PENDING.value:
        order.status = OrderStatus.PROCESSING.value

    db.commit()
    logger.info("Order %s marked paid by user %s (%s)", order.id, actor.id, order.payment_status)
    return _get_order(db, order_id)


def set_status(db: Session, order_id: int, status: str) -> Order:
    """Overwrites the status; any of the five values is accepted from any current status."""
    if status not in ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(s.value for s in OrderStatus)}.")

    order = _get_order(db, order_id)
    previous = order.status
    order.status = status
    db.commit()
    logger.info("Order %s status changed %s -> %s", order.id, previous, status)
    return _get_order(db, order_id)
