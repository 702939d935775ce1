# cafe/services/catalog_service.py
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cafe.data.models.category import CategoryModel
from cafe.data.models.product import ProductModel
from cafe.domain.errors import NotFoundError, PersistenceError, ValidationError
from cafe.domain.schemas import CategoryIn, ProductIn, ProductUpdate
from cafe.repos.catalog_repo import CatalogRepo
from cafe.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogService:
    """Kategorie i produkty menu. Zmiany w katalogu nie ruszaja pozycji historycznych zamowien."""

    def __init__(self, db: Session):
        self.repo = CatalogRepo(db)

    def _save(self, entity, what: str):
        try:
            return self.repo.save(entity)
        except IntegrityError as e:
            self.repo.rollback()
            raise ValidationError(f"{what} conflicts with an existing record") from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to save {what}: {e}")
            raise PersistenceError(f"Failed to save {what}") from e

    # kategorie
    def list_categories(self) -> list[CategoryModel]:
        return self.repo.list_categories()

    def create_category(self, payload: CategoryIn) -> CategoryModel:
        if self.repo.get_category_by_slug(payload.slug):
            raise ValidationError(f"Category with slug '{payload.slug}' already exists", field="slug")

        category = self._save(CategoryModel(**payload.model_dump()), "category")
        logger.info(f"Category {category.id} ({category.slug}) created")
        return category

    def update_category(self, category_id: int, payload: CategoryIn) -> CategoryModel:
        category = self.repo.get_category(category_id)
        if not category:
            raise NotFoundError("Category not found")

        existing = self.repo.get_category_by_slug(payload.slug)
        if existing and existing.id != category_id:
            raise ValidationError(f"Category with slug '{payload.slug}' already exists", field="slug")

        for field, value in payload.model_dump().items():
            setattr(category, field, value)
        return self._save(category, "category")

    def delete_category(self, category_id: int) -> None:
        category = self.repo.get_category(category_id)
        if not category:
            raise NotFoundError("Category not found")

        self.repo.delete_category(category)
        logger.info(f"Category {category_id} deleted")

    # produkty
    def list_products(self, category_slug: str | None = None, available_only: bool = False) -> list[ProductModel]:
        category_id = None
        if category_slug:
            category = self.repo.get_category_by_slug(category_slug)
            if not category:
                return []
            category_id = category.id
        return self.repo.list_products(category_id=category_id, available_only=available_only)

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def _check_category(self, category_id: int | None) -> None:
        if category_id is not None and not self.repo.get_category(category_id):
            raise ValidationError("Category does not exist", field="category_id")

    def create_product(self, payload: ProductIn) -> ProductModel:
        self._check_category(payload.category_id)
        product = self._save(ProductModel(**payload.model_dump()), "product")
        logger.info(f"Product {product.id} ({product.name}) created")
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductModel:
        product = self.get_product(product_id)
        values = payload.model_dump(exclude_unset=True)
        self._check_category(values.get("category_id"))

        for field, value in values.items():
            setattr(product, field, value)
        return self._save(product, "product")

    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)
        self.repo.delete_product(product)
        logger.info(f"Product {product_id} deleted")
