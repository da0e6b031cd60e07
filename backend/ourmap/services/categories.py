"""Category hierarchy — lookup, one-level expansion, and tree validation.

The category tree is at most two levels deep: top-level categories and
their direct subcategories.  ``validate_category_tree`` enforces that when
categories are loaded so ``expand_category`` never needs to recurse.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ourmap.models.category import Category

logger = logging.getLogger(__name__)


class CategoryTreeError(ValueError):
    """The category set would violate the two-level tree shape."""


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.display_order, Category.name).all()


def get_category_by_value(db: Session, value: str) -> Optional[Category]:
    return db.query(Category).filter(Category.value == value).first()


def expand_category(db: Session, value: Optional[str]) -> list[str]:
    """Resolve a filter value into every category value it matches.

    - empty → [] (no filter)
    - unknown → [value] (treated as a literal filter)
    - top-level → [value, *children]
    - subcategory → [value]
    """
    if not value:
        return []

    category = get_category_by_value(db, value)
    if category is None:
        return [value]

    if category.parent_id is None:
        return [value] + [child.value for child in category.children]

    return [value]


def validate_category_tree(categories: Iterable[Category]) -> None:
    """Raise CategoryTreeError unless every parent is itself top-level."""
    by_id = {c.category_id: c for c in categories}
    for category in by_id.values():
        if category.parent_id is None:
            continue
        if category.parent_id == category.category_id:
            raise CategoryTreeError(f"Category '{category.value}' cannot be its own parent")
        parent = by_id.get(category.parent_id)
        if parent is None:
            raise CategoryTreeError(f"Category '{category.value}' references a missing parent")
        if parent.parent_id is not None:
            raise CategoryTreeError(
                f"Category '{category.value}' is nested under subcategory '{parent.value}'; "
                "only two levels are supported"
            )


def create_category(
    db: Session,
    name: str,
    value: str,
    parent_value: Optional[str] = None,
    icon: Optional[str] = None,
    display_order: int = 0,
) -> Category:
    """Insert a category after checking it keeps the tree two levels deep."""
    if get_category_by_value(db, value) is not None:
        raise CategoryTreeError(f"Category value '{value}' already exists")

    parent_id = None
    if parent_value:
        parent = get_category_by_value(db, parent_value)
        if parent is None:
            raise CategoryTreeError(f"Parent category '{parent_value}' not found")
        parent_id = parent.category_id

    category = Category(name=name, value=value, parent_id=parent_id, icon=icon, display_order=display_order)
    db.add(category)
    db.flush()
    try:
        validate_category_tree(db.query(Category).all())
    except CategoryTreeError:
        db.rollback()
        raise
    db.commit()
    db.refresh(category)
    logger.info("Created category '%s' (parent=%s)", value, parent_value)
    return category


def seed_categories(db: Session, tree: dict[str, dict]) -> int:
    """Load a nested ``{value: {"name", "icon", "children": {...}}}`` mapping.

    Existing values are left untouched.  Returns the number of rows added.
    """
    for value, entry in tree.items():
        for child_value, child_entry in entry.get("children", {}).items():
            if child_entry.get("children"):
                raise CategoryTreeError(f"Subcategory '{child_value}' cannot have children")

    added = []
    for order, (value, entry) in enumerate(tree.items()):
        parent = get_category_by_value(db, value)
        if parent is None:
            parent = Category(name=entry["name"], value=value, icon=entry.get("icon"), display_order=order)
            db.add(parent)
            db.flush()
            added.append(parent)
        for child_order, (child_value, child_entry) in enumerate(entry.get("children", {}).items()):
            if get_category_by_value(db, child_value) is None:
                child = Category(
                    name=child_entry["name"],
                    value=child_value,
                    icon=child_entry.get("icon"),
                    parent_id=parent.category_id,
                    display_order=child_order,
                )
                db.add(child)
                added.append(child)

    db.flush()
    try:
        validate_category_tree(db.query(Category).all())
    except CategoryTreeError:
        db.rollback()
        raise
    db.commit()
    logger.info("Seeded %d categories", len(added))
    return len(added)
