from sqlalchemy import Column, Integer, String, ForeignKey
from wedding_planner.db.base_class import Base


class Guest(Base):
    __tablename__ = "guest"

    guest_id = Column(Integer, primary_key=True, autoincrement=True)
    wedding_id = Column(Integer, ForeignKey("wedding.wedding_id", ondelete="CASCADE"), nullable=False, index=True)
    guest_name = Column(String(150), nullable=False)
    table_id = Column(Integer, ForeignKey("seating_table.table_id", ondelete="SET NULL"), nullable=True)
    restriction_id = Column(Integer, ForeignKey("dietary_restriction.restriction_id", ondelete="SET NULL"), nullable=True)
    rsvp_status = Column(String(20), nullable=False, default="pending")
