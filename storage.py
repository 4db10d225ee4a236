"""
Local persistence for QuickInvoice.

Each named record is a JSON document stored as ``<key>.json`` in the
application data directory. Reads never raise: a missing record yields the
default and an unreadable one is logged and yields the default too. Writes
and the full wipe raise StorageError.
"""
from __future__ import annotations
import json
import os
from typing import Any, Iterable, List, Optional

from config import (
    ALL_KEYS,
    CLEANING_SELECTIONS_KEY,
    COMPANY_KEY,
    EMPLOYEE_KEY,
    INVOICES_KEY,
    company_to_dict,
    dict_to_company,
    dict_to_employee,
    dict_to_selections,
    employee_to_dict,
    get_default_selections,
    invoices_to_list,
    list_to_invoices,
    selections_to_dict,
)
from errors import StorageError
from logs import logger
from models import CleaningSelections, Company, Employee, SavedInvoice
from utils import app_dir

log = logger(__file__)

_MISSING = object()


class JsonStore:
    """Key-value store backed by one JSON file per key"""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir or app_dir()
        os.makedirs(self.base_dir, exist_ok=True)

    def path_for(self, key: str) -> str:
        return os.path.join(self.base_dir, f"{key}.json")

    def get(self, key: str, default: Any = None) -> Any:
        """Load a record, returning default when missing or unreadable"""
        try:
            with open(self.path_for(key), "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return default
        except (OSError, ValueError):
            log.exception("Error reading record %s", key)
            return default

    def set(self, key: str, value: Any) -> None:
        """Write a record atomically (temp file then rename)"""
        path = self.path_for(key)
        tmp = f"{path}.tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as ex:
            log.error("Error saving record %s: %s", key, ex)
            raise StorageError(f"Could not save {key}: {ex}") from ex

    def remove_many(self, keys: Iterable[str]) -> None:
        """Delete several records; every key is attempted before failing"""
        failures = []
        for key in keys:
            try:
                os.remove(self.path_for(key))
            except FileNotFoundError:
                continue
            except OSError as ex:
                log.error("Error removing record %s: %s", key, ex)
                failures.append(key)
        if failures:
            raise StorageError(f"Could not remove: {', '.join(failures)}")


class StorageService:
    """Typed access to the four persisted QuickInvoice records"""

    def __init__(self, store: Optional[JsonStore] = None):
        self.store = store or JsonStore()

    # Employee data
    def save_employee(self, employee: Employee) -> None:
        self.store.set(EMPLOYEE_KEY, employee_to_dict(employee))

    def get_employee(self) -> Optional[Employee]:
        """Stored employee, or None when there is none"""
        data = self.store.get(EMPLOYEE_KEY, _MISSING)
        if data is _MISSING or data is None:
            return None
        return dict_to_employee(data)

    # Company data
    def save_company(self, company: Company) -> None:
        self.store.set(COMPANY_KEY, company_to_dict(company))

    def get_company(self) -> Optional[Company]:
        data = self.store.get(COMPANY_KEY, _MISSING)
        if data is _MISSING or data is None:
            return None
        return dict_to_company(data)

    # Invoices
    def save_invoices(self, invoices: List[SavedInvoice]) -> None:
        self.store.set(INVOICES_KEY, invoices_to_list(invoices))

    def get_invoices(self) -> List[SavedInvoice]:
        return list_to_invoices(self.store.get(INVOICES_KEY, []))

    # Cleaning selections
    def save_cleaning_selections(self, selections: CleaningSelections) -> None:
        self.store.set(CLEANING_SELECTIONS_KEY, selections_to_dict(selections))

    def get_cleaning_selections(self) -> CleaningSelections:
        data = self.store.get(CLEANING_SELECTIONS_KEY)
        if data is None:
            return get_default_selections()
        return dict_to_selections(data)

    # Clear all data
    def clear_all_data(self) -> None:
        log.warning("Removing all stored QuickInvoice data from %s", self.store.base_dir)
        self.store.remove_many(ALL_KEYS)
