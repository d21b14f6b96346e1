from sqlalchemy import Column, Integer, String, DECIMAL, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from wedding_planner.db.base_class import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    inventory_id = Column(Integer, primary_key=True, autoincrement=True)
    item_name = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False)
    item_condition = Column(String(30), nullable=False)
    quantity_available = Column(Integer, nullable=False, default=0)
    rental_cost = Column(DECIMAL(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class InventoryAllocation(Base):
    __tablename__ = "inventory_allocation"

    allocation_id = Column(Integer, primary_key=True, autoincrement=True)
    wedding_id = Column(Integer, ForeignKey("wedding.wedding_id", ondelete="CASCADE"), nullable=False, index=True)
    table_id = Column(Integer, ForeignKey("seating_table.table_id", ondelete="SET NULL"), nullable=True)
    inventory_id = Column(Integer, ForeignKey("inventory_items.inventory_id", ondelete="RESTRICT"), nullable=False)
    quantity_used = Column(Integer, nullable=False)
    unit_rental_cost = Column(DECIMAL(10, 2), nullable=False, default=0)

    item = relationship("InventoryItem")
