import pytest

from medicontrol.core.config import PROJECT_ROOT
from medicontrol.core.exceptions import ConfigError, MissingQueryError
from medicontrol.db.queries import QueryRegistry
from medicontrol.services.bootstrap import CRITICAL_QUERIES


def test_queries_are_keyed_by_file_stem(tmp_path):
    (tmp_path / "select_one.sql").write_text("SELECT 1", encoding="utf-8")
    nested = tmp_path / "reports"
    nested.mkdir()
    (nested / "select_two.sql").write_text("SELECT 2", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    registry = QueryRegistry.from_directory(tmp_path)

    assert set(registry) == {"select_one", "select_two"}
    assert registry.lookup("select_one") == "SELECT 1"
    assert registry["select_two"] == "SELECT 2"


def test_lookup_of_unknown_name_returns_none(tmp_path):
    registry = QueryRegistry.from_directory(tmp_path)

    assert registry.lookup("nope") is None
    assert len(registry) == 0


def test_require_raises_missing_query(tmp_path):
    registry = QueryRegistry.from_directory(tmp_path)

    with pytest.raises(MissingQueryError) as exc_info:
        registry.require("insert_sale")

    assert exc_info.value.query_name == "insert_sale"
    assert exc_info.value.status_code == 500


def test_ensure_lists_every_missing_query(tmp_path):
    (tmp_path / "insert_sale.sql").write_text("SELECT 1", encoding="utf-8")
    registry = QueryRegistry.from_directory(tmp_path)

    with pytest.raises(ConfigError) as exc_info:
        registry.ensure(["insert_sale", "insert_sale_item", "insert_movement"])

    assert "insert_movement" in exc_info.value.message
    assert "insert_sale_item" in exc_info.value.message


def test_missing_directory_is_a_config_error(tmp_path):
    with pytest.raises(ConfigError):
        QueryRegistry.from_directory(tmp_path / "absent")


def test_shipped_sql_covers_critical_queries():
    registry = QueryRegistry.from_directory(PROJECT_ROOT / "sql")

    registry.ensure(CRITICAL_QUERIES)
