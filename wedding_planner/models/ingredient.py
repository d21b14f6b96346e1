from sqlalchemy import Column, Integer, String, DECIMAL, DateTime, func
from wedding_planner.db.base_class import Base


class Ingredient(Base):
    __tablename__ = "ingredient"

    ingredient_id = Column(Integer, primary_key=True, autoincrement=True)
    ingredient_name = Column(String(100), nullable=False)
    unit = Column(String(20), nullable=False)
    stock_quantity = Column(DECIMAL(12, 2), nullable=False, default=0)
    re_order_level = Column(DECIMAL(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
