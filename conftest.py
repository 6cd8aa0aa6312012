"""
Shared pytest configuration

Points the application at a throwaway SQLite database before any
``sales_tracker`` module reads its settings.
"""

import os
import tempfile

import pytest

_TEST_DB_DIR = tempfile.mkdtemp(prefix="sales_tracker_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture(autouse=True)
def clean_database():
    """Create the tables and start every test with an empty sales table"""
    from sales_tracker.db.session import init_db, get_db_session
    from sales_tracker.db.repository import SaleItemRepository

    init_db()
    with get_db_session() as session:
        SaleItemRepository().delete_all(session)
    yield
