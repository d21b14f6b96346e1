from sqlalchemy import Column, Integer, String, Date, Time, DECIMAL, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from wedding_planner.db.base_class import Base


class Wedding(Base):
    __tablename__ = "wedding"

    wedding_id = Column(Integer, primary_key=True, autoincrement=True)
    couple_id = Column(Integer, ForeignKey("couple.couple_id", ondelete="RESTRICT"), nullable=False)
    wedding_date = Column(Date, nullable=False)
    wedding_time = Column(Time)
    venue = Column(String(255), nullable=False)
    guest_count = Column(Integer, default=0)
    payment_status = Column(String(30), nullable=False, default="pending")

    # Derived totals, rewritten by CostingService.update_wedding_costs
    equipment_rental_cost = Column(DECIMAL(12, 2), nullable=False, default=0)
    food_cost = Column(DECIMAL(12, 2), nullable=False, default=0)
    total_cost = Column(DECIMAL(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    couple = relationship("Couple", back_populates="weddings")
