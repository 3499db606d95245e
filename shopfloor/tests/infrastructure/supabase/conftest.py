"""
In-memory stand-in for the supabase-py table API.

Supports the chained calls the adapters make (``select``, ``insert``,
``update``, ``delete``, ``eq``, ``in_``, ``order``, ``limit``) and lets a test
make a given table operation fail or interleave a concurrent write.
"""

import copy
from collections.abc import Callable
from types import SimpleNamespace
from uuid import uuid4

import pytest


class FakeQuery:
    def __init__(self, client: "FakeSupabaseClient", table: str):
        self._client = client
        self._table = table
        self._action = "select"
        self._payload = None
        self._filters = []
        self._order = None
        self._limit = None

    def select(self, columns="*"):
        self._action = "select"
        return self

    def insert(self, payload):
        self._action = "insert"
        self._payload = payload
        return self

    def update(self, values):
        self._action = "update"
        self._payload = values
        return self

    def delete(self):
        self._action = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column):
        self._order = column
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self):
        self._client.calls.append((self._table, self._action))
        hook = self._client.hooks.pop((self._table, self._action), None)
        if hook is not None:
            hook(self._client)
        failure = self._client.failures.pop((self._table, self._action), None)
        if failure is not None:
            raise failure

        rows = self._client.tables.setdefault(self._table, [])
        if self._action == "insert":
            records = self._payload if isinstance(self._payload, list) else [self._payload]
            rows.extend(copy.deepcopy(records))
            return SimpleNamespace(data=copy.deepcopy(records))

        matched = [row for row in rows if all(f(row) for f in self._filters)]
        if self._action == "update":
            for row in matched:
                row.update(self._payload)
        elif self._action == "delete":
            self._client.tables[self._table] = [row for row in rows if row not in matched]

        if self._order:
            matched = sorted(matched, key=lambda row: row.get(self._order) or "")
        if self._limit is not None:
            matched = matched[: self._limit]
        return SimpleNamespace(data=copy.deepcopy(matched))


class FakeSupabaseClient:
    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self.hooks: dict[tuple[str, str], Callable] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail(self, table: str, action: str, error: Exception) -> None:
        """Make the next ``action`` on ``table`` raise ``error``."""
        self.failures[(table, action)] = error

    def before(self, table: str, action: str, hook: Callable) -> None:
        """Run ``hook(client)`` just before the next ``action`` on ``table``."""
        self.hooks[(table, action)] = hook


@pytest.fixture
def client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def hosted_work_order(client) -> dict:
    record = {
        "id": str(uuid4()),
        "display_id": "WO-2001",
        "item_code": "BRACKET-7",
        "customer": "Initech",
        "quantity": 600,
        "cycle_time_seconds": 20.0,
        "qc_material_passed": True,
        "due_date": None,
    }
    client.tables["work_orders"] = [record]
    return record


@pytest.fixture
def hosted_machines(client) -> list[dict]:
    records = [
        {"machine_id": "CNC-02", "name": "Okuma", "location": "Bay A", "status": "idle"},
        {"machine_id": "CNC-01", "name": "Haas", "location": "Bay A", "status": "idle"},
        {"machine_id": "CNC-09", "name": "", "location": "Bay C", "status": "maintenance"},
    ]
    for record in records:
        record["id"] = str(uuid4())
    client.tables["machines"] = records
    return records
