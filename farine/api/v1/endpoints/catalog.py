"""Catalog endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from farine.db.session import get_db
from farine.models.catalog import Category, Product
from farine.schemas.catalog import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from farine.services.catalog_service import (
    CategoryInUseError,
    DuplicateCategoryError,
    create_category,
    create_product,
    delete_category,
    delete_product,
    list_categories,
    list_products,
    rename_category,
    update_product,
)

router: APIRouter = APIRouter()


def _serialize_product(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        category_id=product.category_id,
        category_name=product.category.name,
        name=product.name,
        unit=product.unit,
        price_ttc=product.price_ttc,
        description=product.description,
        photo_url=product.photo_url,
        is_active=product.is_active,
    )


def _require_category(db: Session, category_id: int) -> Category:
    category: Category | None = db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.get("/categories", response_model=list[CategoryResponse])
def get_categories(db: Session = Depends(get_db)) -> list[Category]:
    return list_categories(db)


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def post_category(payload: CategoryCreate, db: Session = Depends(get_db)) -> Category:
    try:
        return create_category(db, payload.name)
    except DuplicateCategoryError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category already exists") from exc


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
def patch_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)) -> Category:
    category = _require_category(db, category_id)
    try:
        return rename_category(db, category, payload.name)
    except DuplicateCategoryError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category already exists") from exc


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_category(category_id: int, db: Session = Depends(get_db)) -> Response:
    category = _require_category(db, category_id)
    try:
        delete_category(db, category)
    except CategoryInUseError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category still has products") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/products", response_model=list[ProductResponse])
def get_products(
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> list[ProductResponse]:
    """List storefront products; the back-office passes include_inactive."""
    return [_serialize_product(product) for product in list_products(db, include_inactive=include_inactive)]


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def post_product(payload: ProductCreate, db: Session = Depends(get_db)) -> ProductResponse:
    _require_category(db, payload.category_id)
    product = create_product(db, **payload.model_dump())
    return _serialize_product(product)


@router.patch("/products/{product_id}", response_model=ProductResponse)
def patch_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)) -> ProductResponse:
    product: Product | None = db.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("category_id") is not None:
        _require_category(db, changes["category_id"])
    return _serialize_product(update_product(db, product, changes))


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_product(product_id: int, db: Session = Depends(get_db)) -> Response:
    """Delete a product; deactivating it is usually what the shop wants."""
    product: Product | None = db.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    delete_product(db, product)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
