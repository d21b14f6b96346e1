from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from wedding_planner.db.base_class import Base


class Couple(Base):
    __tablename__ = "couple"

    couple_id = Column(Integer, primary_key=True, autoincrement=True)
    partner1_name = Column(String(100), nullable=False)
    partner2_name = Column(String(100), nullable=False)
    partner1_phone = Column(String(30))
    partner2_phone = Column(String(30))
    partner1_email = Column(String(255))
    partner2_email = Column(String(255))
    planner_contact = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    weddings = relationship("Wedding", back_populates="couple")
