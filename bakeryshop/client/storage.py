"""A file-backed stand-in for the browser's localStorage.

Values are opaque JSON blobs under fixed key names. The whole mapping is
rewritten on every change, which is fine for the handful of keys kept here.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

SELECTED_PRODUCT_KEY = "selectedProduct"
CART_KEY = "cart"
CHECKOUT_KEY = "checkoutData"
TOKEN_KEY = "authToken"


class LocalStorage:
    def __init__(self, path: Optional[os.PathLike] = None):
        # path=None keeps everything in memory (handy for scripts and tests)
        self.path = Path(path) if path is not None else None
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            # a corrupt file behaves like cleared browser storage
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")

    def get_item(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set_item(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def remove_item(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._save()

    def clear(self) -> None:
        self._data = {}
        self._save()
