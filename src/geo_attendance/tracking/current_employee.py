from __future__ import annotations

from typing import Optional

from ..common.validators import require_non_empty
from ..core.constants import CURRENT_EMPLOYEE_KEY
from ..storage.repository import KeyValueStore


class CurrentEmployeeStore:
    """Pointer to the employee logged in on this device.

    Lives under its own key; clearing it never touches the ledger blob.
    """

    def __init__(self, store: KeyValueStore, *, key: str = CURRENT_EMPLOYEE_KEY):
        self._store = store
        self._key = key

    def get(self) -> Optional[str]:
        return self._store.get_item(self._key) or None

    def set(self, code: str) -> str:
        code = require_non_empty(code, "Employee code")
        self._store.set_item(self._key, code)
        return code

    def clear(self) -> None:
        self._store.remove_item(self._key)
