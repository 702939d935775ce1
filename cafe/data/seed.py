# cafe/data/seed.py
from decimal import Decimal

from cafe.data.database import Base, SessionLocal, engine
from cafe.data.models import CategoryModel, ProductModel
from cafe.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

CATEGORIES = [
    {"slug": "chai", "name": "Chai", "description": "Freshly brewed tea"},
    {"slug": "snacks", "name": "Snacks", "description": "Perfect with a cup of chai"},
]

PRODUCTS = [
    ("chai", "Masala Chai", "Our signature tea brewed with fresh ginger, cardamom, and secret spices.", "25", "/images/masala-chai.jpg", True),
    ("chai", "Elaichi Chai", "Aromatic cardamom tea for a refreshing break.", "20", "/images/elaichi-chai.jpg", False),
    ("chai", "Ginger Chai", "Strong ginger tea perfect for cold weather.", "20", "/images/ginger-chai.jpg", False),
    ("snacks", "Bun Maska", "Soft fresh bun slathered with generous butter.", "40", "/images/bun-maska.jpg", True),
    ("snacks", "Veg Samosa", "Crispy pastry filled with spiced potatoes and peas.", "15", "/images/samosa.jpg", True),
]


def seed():
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(CategoryModel).first():
            logger.info("Catalog already seeded, skipping")
            return

        by_slug = {}
        for data in CATEGORIES:
            category = CategoryModel(**data)
            db.add(category)
            by_slug[data["slug"]] = category
        db.flush()

        for slug, name, description, price, image, popular in PRODUCTS:
            db.add(
                ProductModel(
                    name=name,
                    description=description,
                    price=Decimal(price),
                    image=image,
                    category_id=by_slug[slug].id,
                    is_popular=popular,
                )
            )
        db.commit()
        logger.info(f"Seeded {len(CATEGORIES)} categories and {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    Base.metadata.create_all(bind=engine)
    seed()
