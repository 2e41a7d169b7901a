"""Pytest fixtures for ShopSmart tests."""

import os
import tempfile
from pathlib import Path

import pytest

# Point the application at a throwaway database before config.py is imported
_TEST_DB_DIR = tempfile.mkdtemp(prefix="shopsmart-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'test.db'}"
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture(autouse=True)
def fresh_schema():
    """Recreate every table so each test starts from an empty store."""
    from database import Base, engine, init_db

    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def db():
    from database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def make_user(db):
    """Factory creating a committed user; returns the ORM object."""
    from models.users import User, Role
    from utils.hashing import get_password_hash

    counter = {"n": 0}

    def _make(role=Role.USER, name=None, email=None, password="secret123"):
        counter["n"] += 1
        user = User(
            name=name or f"Shopper {counter['n']}",
            email=email or f"user{counter['n']}@example.com",
            password_hash=get_password_hash(password),
            role=role.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    from models.users import Role

    return make_user(role=Role.ADMIN, name="Store Admin", email="admin@example.com")


@pytest.fixture
def auth_headers():
    from utils.tokenJWT import generate_token

    def _headers(user):
        return {"Authorization": f"Bearer {generate_token(user)}"}

    return _headers


@pytest.fixture
def category(db):
    from models.category import Category

    cat = Category(name="Vegetables", description="Fresh vegetables")
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture
def make_product(db, category):
    """Factory creating a committed product in the default category."""
    from models.product import Product

    def _make(title="Tomatoes 1kg", price=100.0, stock=5, category_id=None, description=None, image=None):
        product = Product(
            title=title,
            description=description or f"{title} description",
            category_id=category_id or category.id,
            price=price,
            stock=stock,
            image=image or f"https://img.example.com/{title.replace(' ', '-').lower()}.jpg",
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def shipping_address():
    return {"address": "12 Market Street", "city": "Pune", "postal_code": "411001", "country": "India"}
