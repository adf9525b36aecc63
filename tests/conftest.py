import os
import tempfile

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="pharmasys-uploads-")

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pharmasys.main import app
from pharmasys.database import Base, engine, SessionLocal, get_db
from pharmasys.auth import get_current_user, get_password_hash
from pharmasys.models import User, ItemCategory, ItemType, ItemUnit, Item


@pytest.fixture(autouse=True)
def db_schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin_user(db):
    user = User(
        name="Admin",
        email="admin@example.com",
        role="admin",
        hashed_password=get_password_hash("secret123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def client(admin_user):
    user_id = admin_user.id

    def override_current_user(db: Session = Depends(get_db)):
        return db.query(User).filter(User.id == user_id).first()

    app.dependency_overrides[get_current_user] = override_current_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client():
    """Client going through the real token check (unless ``client`` is also in use)."""
    return TestClient(app)


@pytest.fixture
def master_data(db):
    """A category, type and unit set like a fresh pharmacy would have."""
    category = ItemCategory(name="Antibiotik", description="Obat antibiotik")
    item_type = ItemType(name="Obat Keras")
    box = ItemUnit(name="Box")
    strip = ItemUnit(name="Strip")
    tablet = ItemUnit(name="Tablet")
    db.add_all([category, item_type, box, strip, tablet])
    db.commit()
    return {
        "category_id": category.id,
        "type_id": item_type.id,
        "box_id": box.id,
        "strip_id": strip.id,
        "tablet_id": tablet.id,
    }


@pytest.fixture
def amoxicillin(db, master_data):
    """Stocked in boxes; a box holds 10 strips or 100 tablets."""
    item = Item(
        code="KBAB01",
        name="Amoxicillin 500mg",
        category_id=master_data["category_id"],
        type_id=master_data["type_id"],
        unit_id=master_data["box_id"],
        base_unit="Box",
        base_price=50000,
        sell_price=65000,
        stock=20,
        min_stock=5,
        unit_conversions=[
            {"unit_name": "Strip", "to_unit_id": master_data["strip_id"], "conversion_rate": 10,
             "base_price": 5000, "sell_price": 6500},
            {"unit_name": "Tablet", "to_unit_id": master_data["tablet_id"], "conversion_rate": 100,
             "base_price": 500, "sell_price": 650},
        ],
    )
    db.add(item)
    db.commit()
    return item.id
