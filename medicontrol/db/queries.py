"""
Named SQL statements.

Every ``*.sql`` file under the query directory is registered under its
base filename, so ``sql/insert_sale.sql`` becomes ``insert_sale``. The
registry is built once at startup and is read-only afterwards.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from medicontrol.core.exceptions import ConfigError, MissingQueryError

logger = logging.getLogger("app")


class QueryRegistry(Mapping):
    def __init__(self, queries: Mapping[str, str]):
        self._queries = MappingProxyType(dict(queries))

    @classmethod
    def from_directory(cls, directory: Path | str) -> "QueryRegistry":
        root = Path(directory)
        if not root.is_dir():
            raise ConfigError(f"SQL directory not found: {root}")

        queries: dict[str, str] = {}
        for path in sorted(root.rglob("*.sql")):
            if not path.is_file():
                continue
            name = path.stem
            if name in queries:
                logger.warning(f"Duplicate query name '{name}' at {path}; keeping the last one")
            queries[name] = path.read_text(encoding="utf-8")
            logger.debug(f"Loaded query: {name}")

        if not queries:
            logger.warning(f"No .sql files found in {root}")

        return cls(queries)

    def lookup(self, name: str) -> str | None:
        return self._queries.get(name)

    def require(self, name: str) -> str:
        sql = self._queries.get(name)
        if sql is None:
            logger.error(f"SQL query '{name}' not found")
            raise MissingQueryError(name)
        return sql

    def ensure(self, names: Iterable[str]) -> None:
        missing = sorted(n for n in set(names) if n not in self._queries)
        if missing:
            raise ConfigError(f"Missing critical SQL queries: {', '.join(missing)}")

    def __getitem__(self, name: str) -> str:
        return self._queries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._queries)

    def __len__(self) -> int:
        return len(self._queries)
