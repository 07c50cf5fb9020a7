import os

# must be set before storefront is imported, the engine is built at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from storefront.data.database import Base, SessionLocal, engine  # noqa: E402
from storefront.data.models import (  # noqa: E402
    AddressModel,
    CategoryModel,
    ProductModel,
    UserModel,
)


class Factory:
    """Seeds catalog and user rows directly, committed so every session sees them."""

    def __init__(self, db):
        self.db = db
        self._category = None
        self._counter = 0

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def category(self, name=None, parent_id=None):
        self._counter += 1
        return self._save(CategoryModel(name=name or f"Category {self._counter}", parent_id=parent_id))

    def product(self, name="Keyboard", price="50.00", stock=10, category=None, is_active=True):
        if category is None:
            if self._category is None:
                self._category = self.category(name="Default")
            category = self._category
        return self._save(
            ProductModel(
                name=name,
                description="",
                price=Decimal(price),
                currency="USD",
                stock=stock,
                is_active=is_active,
                category_id=category.id,
                version=1,
            )
        )

    def address(self, city="Warsaw"):
        return self._save(
            AddressModel(country="PL", city=city, postcode="00-001", street="Marszalkowska", number="1")
        )

    def user(self, email=None):
        self._counter += 1
        address = self.address()
        return self._save(
            UserModel(
                email=email or f"user{self._counter}@example.com",
                name="Jan",
                surname="Kowalski",
                address_id=address.id,
            )
        )


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def client():
    from storefront.main import app

    with TestClient(app) as c:
        yield c
