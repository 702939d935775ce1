# cafe/repos/catalog_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from cafe.data.models.category import CategoryModel
from cafe.data.models.product import ProductModel


class CatalogRepo:
    def __init__(self, db: Session):
        self.db = db

    # kategorie
    def list_categories(self) -> list[CategoryModel]:
        stmt = select(CategoryModel).order_by(CategoryModel.created_at.desc(), CategoryModel.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_category_by_slug(self, slug: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.slug == slug)
        ).scalar_one_or_none()

    def delete_category(self, category: CategoryModel) -> None:
        #produkty zostaja, tylko bez kategorii
        self.db.execute(
            update(ProductModel)
            .where(ProductModel.category_id == category.id)
            .values(category_id=None)
        )
        self.db.delete(category)
        self.db.commit()

    # produkty
    def list_products(
        self,
        category_id: int | None = None,
        available_only: bool = False,
    ) -> list[ProductModel]:
        stmt = select(ProductModel)
        if category_id is not None:
            stmt = stmt.where(ProductModel.category_id == category_id)
        if available_only:
            stmt = stmt.where(ProductModel.is_available.is_(True))
        stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.commit()

    # wspolne
    def save(self, entity):
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def rollback(self):
        self.db.rollback()
