from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index, func
from sqlalchemy.orm import relationship
from database import Base

# One row per audited request: auth, catalog, cart and checkout events.
# Rows outlive the user that produced them
class Log(Base):
    __tablename__ = "logs"
    __table_args__ = (
        Index("ix_logs_resource_ts", "resource", "ts"),
    )

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # e.g. ORDER_CREATE / orders / FAIL
    action = Column(String(50), nullable=False, index=True)
    resource = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="SUCCESS", index=True)
    ip = Column(String(64), nullable=True)

    # Request-specific details such as order id, totals or rejection reason
    meta = Column(JSON, nullable=True)

    user = relationship("User", lazy="joined")
