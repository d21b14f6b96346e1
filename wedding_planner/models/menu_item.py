from sqlalchemy import Column, Integer, String, Boolean, DECIMAL, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from wedding_planner.db.base_class import Base


class MenuItem(Base):
    __tablename__ = "menu_item"

    menu_item_id = Column(Integer, primary_key=True, autoincrement=True)
    menu_name = Column(String(100), nullable=False)
    unit_cost = Column(DECIMAL(10, 2), nullable=False, default=0)
    selling_price = Column(DECIMAL(10, 2), nullable=False, default=0)
    default_markup_percentage = Column(DECIMAL(6, 2), nullable=False, default=0)
    cost_override = Column(Boolean, nullable=False, default=False)
    menu_type = Column(String(50), nullable=False)
    restriction_id = Column(Integer, ForeignKey("dietary_restriction.restriction_id", ondelete="SET NULL"), nullable=True)

    recipe_lines = relationship("Recipe", back_populates="menu_item", order_by="Recipe.recipe_id")
    restriction = relationship("DietaryRestriction")


class Recipe(Base):
    __tablename__ = "recipe"

    __table_args__ = (
        UniqueConstraint('menu_item_id', 'ingredient_id', name='uix_recipe_menu_item_ingredient'),
    )

    recipe_id = Column(Integer, primary_key=True, autoincrement=True)
    menu_item_id = Column(Integer, ForeignKey("menu_item.menu_item_id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredient.ingredient_id", ondelete="RESTRICT"), nullable=False)
    quantity_needed = Column(DECIMAL(10, 2), nullable=False)

    menu_item = relationship("MenuItem", back_populates="recipe_lines")
    ingredient = relationship("Ingredient")
