"""
Storage — Хранилища snapshot корзины

Last-write-wins, без кросс-процессной согласованности.
"""

from pathlib import Path
from typing import Optional

from shopless.cart.config import STORAGE_KEY


class InMemoryStorage:
    """Хранилище в памяти (аналог sessionStorage)."""

    def __init__(self, initial: Optional[str] = None):
        self.data = initial
        self.writes = 0

    def load(self) -> Optional[str]:
        return self.data

    def save(self, data: str) -> None:
        self.data = data
        self.writes += 1


class JsonFileStorage:
    """
    Хранилище в JSON файле (аналог localStorage).

    Файл по умолчанию: <directory>/shoplessCart.json
    """

    def __init__(self, path: Path | str):
        path = Path(path)
        self.path = path / f"{STORAGE_KEY}.json" if path.is_dir() else path

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, data: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(data, encoding="utf-8")
        tmp.replace(self.path)
