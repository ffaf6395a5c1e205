# ===== courtside/models/payment.py =====
from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
import enum
from courtside.models.base import Base


class PaymentMethod(str, enum.Enum):
    ON_PLACE = "on_place"
    CARD = "card"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_id = Column(Integer, ForeignKey("facility_reservations.id"), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    payment_method = Column(String(20), nullable=True)  # on_place, card
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    paid_at = Column(DateTime(timezone=True), nullable=True)
