"""
Reference data lookups (stores and employees) consumed by the engine.

The engine only reads through `get_store` / `get_employee`; ownership of the
data stays with whoever populates the directory.
"""

import threading
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session

from models.employee import Employee
from models.store import Store


class Directory(Protocol):
    def get_store(self, store_id: str) -> Optional[Store]: ...

    def get_employee(self, employee_id: str) -> Optional[Employee]: ...


class StaticDirectory:
    """In-memory directory, populated up front and replaceable wholesale."""

    def __init__(self, stores: Iterable[Store] = (), employees: Iterable[Employee] = ()):
        self._lock = threading.Lock()
        self._stores: Dict[str, Store] = {s.id: s for s in stores}
        self._employees: Dict[str, Employee] = {e.id: e for e in employees}

    def get_store(self, store_id: str) -> Optional[Store]:
        with self._lock:
            return self._stores.get(store_id)

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        with self._lock:
            return self._employees.get(employee_id)

    def replace(self, stores: Iterable[Store], employees: Iterable[Employee]) -> None:
        stores_by_id = {s.id: s for s in stores}
        employees_by_id = {e.id: e for e in employees}
        with self._lock:
            self._stores = stores_by_id
            self._employees = employees_by_id


class DatabaseDirectory:
    """Directory backed by the `store` / `employee` tables."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def get_store(self, store_id: str) -> Optional[Store]:
        with Session(self._engine) as session:
            store = session.get(Store, store_id)
            if store is not None:
                # Detach so callers can read attributes after the session closes
                session.expunge(store)
            return store

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        with Session(self._engine) as session:
            employee = session.get(Employee, employee_id)
            if employee is not None:
                session.expunge(employee)
            return employee
