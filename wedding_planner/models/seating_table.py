from sqlalchemy import Column, Integer, String, ForeignKey
from wedding_planner.db.base_class import Base


class SeatingTable(Base):
    __tablename__ = "seating_table"

    table_id = Column(Integer, primary_key=True, autoincrement=True)
    wedding_id = Column(Integer, ForeignKey("wedding.wedding_id", ondelete="CASCADE"), nullable=False, index=True)
    table_number = Column(String(10), nullable=False)
    table_category = Column(String(20), nullable=False, default="guest")  # 'couple' or 'guest'
    capacity = Column(Integer)
