"""Category ORM model — two-level tree used for filter expansion."""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ourmap.database import Base


class Category(Base):
    __tablename__ = "categories"

    category_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    value = Column(String(100), nullable=False, unique=True)
    icon = Column(String(100), nullable=True)
    parent_id = Column(String(36), ForeignKey("categories.category_id", ondelete="CASCADE"), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    children = relationship(
        "Category",
        back_populates="parent",
        order_by="Category.display_order",
        cascade="all, delete-orphan",
    )
    parent = relationship("Category", back_populates="children", remote_side=[category_id])
