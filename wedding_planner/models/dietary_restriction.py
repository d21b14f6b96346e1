from sqlalchemy import Column, Integer, String
from wedding_planner.db.base_class import Base


class DietaryRestriction(Base):
    __tablename__ = "dietary_restriction"

    restriction_id = Column(Integer, primary_key=True, autoincrement=True)
    restriction_name = Column(String(100), nullable=False)
    severity_level = Column(String(30), nullable=False)
    restriction_type = Column(String(50), nullable=False)
