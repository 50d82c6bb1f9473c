"""Catalog service helpers shared by storefront and back-office routes."""

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from farine.models.catalog import Category, Product
from farine.models.order import OrderItem


class DuplicateCategoryError(Exception):
    """Raised when a category name is already taken."""


class CategoryInUseError(Exception):
    """Raised when deleting a category that still holds products."""


def list_categories(db: Session) -> list[Category]:
    """Return categories in storefront order."""
    return db.query(Category).order_by(Category.sort_order.asc(), Category.id.asc()).all()


def create_category(db: Session, name: str) -> Category:
    """Append a category at the end of the sort order."""
    cleaned = name.strip()
    if db.query(Category).filter(Category.name == cleaned).first() is not None:
        raise DuplicateCategoryError(cleaned)

    max_sort_order: int | None = db.query(func.max(Category.sort_order)).scalar()
    category = Category(name=cleaned, sort_order=(max_sort_order or 0) + 1)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def rename_category(db: Session, category: Category, name: str) -> Category:
    cleaned = name.strip()
    clash = db.query(Category).filter(Category.name == cleaned, Category.id != category.id).first()
    if clash is not None:
        raise DuplicateCategoryError(cleaned)

    category.name = cleaned
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category: Category) -> None:
    """Delete an empty category; categories with products must be emptied first."""
    product_count: int = db.query(func.count(Product.id)).filter(Product.category_id == category.id).scalar() or 0
    if product_count:
        raise CategoryInUseError(category.name)
    db.delete(category)
    db.commit()


def list_products(db: Session, include_inactive: bool = False) -> list[Product]:
    """Return products grouped by category order, active ones only by default."""
    query = db.query(Product).join(Category, Product.category_id == Category.id).options(joinedload(Product.category))
    if not include_inactive:
        query = query.filter(Product.is_active.is_(True))
    return query.order_by(Category.sort_order.asc(), Product.name.asc()).all()


def create_product(
    db: Session,
    *,
    category_id: int,
    name: str,
    unit: str,
    price_ttc: Decimal,
    description: str | None = None,
    photo_url: str | None = None,
    is_active: bool = True,
) -> Product:
    """Create and persist a product."""
    product = Product(
        category_id=category_id,
        name=name.strip(),
        unit=unit,
        price_ttc=price_ttc,
        description=description,
        photo_url=photo_url,
        is_active=is_active,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product: Product, changes: dict) -> Product:
    """Apply a partial update to a product."""
    for field, value in changes.items():
        setattr(product, field, value)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product: Product) -> None:
    """Delete a product; past order lines keep their name and price snapshot."""
    db.query(OrderItem).filter(OrderItem.product_id == product.id).update(
        {OrderItem.product_id: None}, synchronize_session=False
    )
    db.delete(product)
    db.commit()
