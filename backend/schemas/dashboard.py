from typing import List, Optional, Any
from datetime import datetime

from schemas.common import ORMBase
from schemas.order import OrderOut
from schemas.product import ProductOut


class DashboardCounts(ORMBase):
    users: int
    products: int
    orders: int
    categories: int


class MonthlySales(ORMBase):
    month: int
    revenue: float
    orders: int


class RevenueSummary(ORMBase):
    total: float
    monthly_sales: List[MonthlySales]


class DashboardOut(ORMBase):
    counts: DashboardCounts
    revenue: RevenueSummary
    recent_orders: List[OrderOut]
    low_stock_products: List[ProductOut]


# Audit log entry as shown to administrators
class LogResponse(ORMBase):
    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: Optional[datetime] = None
    meta: Optional[Any] = None
