from sqlalchemy import Column, Integer, String, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship
from wedding_planner.db.base_class import Base


class Package(Base):
    __tablename__ = "package"

    package_id = Column(Integer, primary_key=True, autoincrement=True)
    package_name = Column(String(100), nullable=False)
    package_type = Column(String(50), nullable=False)
    # Stored copy of sum(menu_item.unit_cost * quantity), re-synced on read
    unit_cost = Column(DECIMAL(10, 2), nullable=False, default=0)
    selling_price = Column(DECIMAL(10, 2), nullable=False, default=0)
    default_markup_percentage = Column(DECIMAL(6, 2), nullable=False, default=0)

    package_items = relationship("PackageMenuItem", back_populates="package", order_by="PackageMenuItem.id")


class PackageMenuItem(Base):
    __tablename__ = "package_menu_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    package_id = Column(Integer, ForeignKey("package.package_id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_item.menu_item_id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    package = relationship("Package", back_populates="package_items")
    menu_item = relationship("MenuItem")


class TablePackage(Base):
    """A package sold to one seating table. Uniqueness of (table_id, package_id) is checked by the service."""
    __tablename__ = "table_package"

    assignment_id = Column(Integer, primary_key=True, autoincrement=True)
    table_id = Column(Integer, ForeignKey("seating_table.table_id", ondelete="CASCADE"), nullable=False, index=True)
    package_id = Column(Integer, ForeignKey("package.package_id", ondelete="CASCADE"), nullable=False, index=True)
