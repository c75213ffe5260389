from pathlib import Path

from sqlalchemy import inspect


def test_init_db_creates_tables(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "nested" / "storefront_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("STOREFRONT_DB_AUTO_CREATE", "true")

    from services.api.app.db.database import get_engine
    from services.api.app.db.init_db import init_db

    init_db()

    inspector = inspect(get_engine())
    tables = set(inspector.get_table_names())

    assert db_path.exists()
    assert {"users", "products", "deals", "product_deals", "carts", "cart_items"} <= tables
    assert {"addresses", "payment_methods"} <= tables


def test_init_db_respects_auto_create_flag(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "storefront_off.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("STOREFRONT_DB_AUTO_CREATE", "false")

    from services.api.app.db.database import get_engine
    from services.api.app.db.init_db import init_db

    init_db()

    assert inspect(get_engine()).get_table_names() == []
