"""Pytest configuration and shared fixtures"""
import os
import tempfile
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="retail_insights_uploads_"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from retail_insights.common.database import get_db
from retail_insights.common.models import Base
from retail_insights.main import app
from retail_insights.normalization.normalizer import PackSizeNormalizer

CATALOG_HEADER = "Category,Product Name,Price,Pack Size,Rating,MRP\n"

CATALOG_ROWS = [
    "Fruits & Vegetables,Onion,40,600-800 g,4.2,50\n",
    "Cooking Essentials,Basmati Rice,120,1 kg,4.5,150\n",
    "Munchies,Potato Chips,20,50 g,4.0,20\n",
    "Munchies,Nachos,90,150 g,3.8,100\n",
    "Cold Drinks & Juices,Orange Juice,110,1 l,4.1,125\n",
    "Cold Drinks & Juices,Coconut Water,60,200-300 ml,4.3,60\n",
    "Health & Hygiene,Multivitamin,300,500 mg,4.6,350\n",
    "Dairy,Eggs,84,6 pcs,4.4,90\n",
    "Dairy,Paneer,95,200 g,4.7,100\n",
    "Misc,Gift Card,500,12345,,500\n",
    "Misc,Combo Box,250,Combo,3.9,300\n",
    "Misc,Mystery Item,99,,3.5,\n",
]


@pytest.fixture(scope="function")
def test_db():
    """Create in-memory SQLite database for testing"""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def client(test_db):
    """Create FastAPI test client with test database"""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def normalizer():
    """Default pack size normalizer"""
    return PackSizeNormalizer()


@pytest.fixture
def sample_catalog_csv():
    """Create a catalog CSV covering every unit rule"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False, encoding='utf-8') as tmp:
        tmp.write(CATALOG_HEADER)
        tmp.writelines(CATALOG_ROWS)
        tmp.flush()
        yield tmp.name

    Path(tmp.name).unlink(missing_ok=True)


@pytest.fixture
def sample_csv_semicolon():
    """Create CSV file with semicolon delimiter"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False) as tmp:
        tmp.write("name;price;pack_size\n")
        tmp.write("Onion;40;1 kg\n")
        tmp.write("Tomato;30;500 g\n")
        tmp.flush()
        yield tmp.name

    Path(tmp.name).unlink(missing_ok=True)


@pytest.fixture
def temp_csv_file():
    """Create an empty temporary CSV path"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False) as f:
        yield f.name
    Path(f.name).unlink(missing_ok=True)
