# backend/services/dashboard.py
from sqlalchemy import func, extract
from sqlalchemy.orm import Session, joinedload

from models.category import Category
from models.order import Order
from models.product import Product
from models.users import User

COMPLETED = "COMPLETED"
LOW_STOCK_THRESHOLD = 10


# Aggregates shown on the admin dashboard. Revenue only counts orders whose
# payment has completed
def get_dashboard_analytics(db: Session) -> dict:
    counts = {
        "users": db.query(func.count(User.id)).scalar() or 0,
        "products": db.query(func.count(Product.id)).scalar() or 0,
        "orders": db.query(func.count(Order.id)).scalar() or 0,
        "categories": db.query(func.count(Category.id)).scalar() or 0,
    }

    total_revenue = (
        db.query(func.coalesce(func.sum(Order.total), 0.0))
        .filter(Order.payment_status == COMPLETED)
        .scalar()
    )

    month = extract("month", Order.paid_at)
    monthly_rows = (
        db.query(month.label("month"), func.sum(Order.total), func.count(Order.id))
        .filter(Order.payment_status == COMPLETED, Order.paid_at.isnot(None))
        .group_by(month)
        .order_by(month)
        .all()
    )
    monthly_sales = [
        {"month": int(m), "revenue": round(float(revenue or 0), 2), "orders": orders}
        for m, revenue, orders in monthly_rows
    ]

    recent_orders = (
        db.query(Order)
        .options(joinedload(Order.items), joinedload(Order.user))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(5)
        .all()
    )

    low_stock_products = (
        db.query(Product)
        .options(joinedload(Product.category))
        .filter(Product.stock < LOW_STOCK_THRESHOLD)
        .order_by(Product.stock.asc(), Product.id.asc())
        .limit(10)
        .all()
    )

    return {
        "counts": counts,
        "revenue": {"total": round(float(total_revenue or 0), 2), "monthly_sales": monthly_sales},
        "recent_orders": recent_orders,
        "low_stock_products": low_stock_products,
    }
