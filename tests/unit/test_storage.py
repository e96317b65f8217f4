"""
Тесты для хранилищ snapshot корзины
"""

from pathlib import Path

from shopless.adapters.storage import InMemoryStorage, JsonFileStorage


class TestInMemoryStorage:
    def test_load_initial(self) -> None:
        assert InMemoryStorage().load() is None
        assert InMemoryStorage('{"currency": "EUR"}').load() == '{"currency": "EUR"}'

    def test_last_write_wins(self) -> None:
        storage = InMemoryStorage()
        storage.save("a")
        storage.save("b")
        assert storage.load() == "b"
        assert storage.writes == 2


class TestJsonFileStorage:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert JsonFileStorage(tmp_path / "cart.json").load() is None

    def test_save_and_load(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "cart.json"
        storage = JsonFileStorage(path)
        storage.save('{"currency": "EUR", "lineItems": []}')

        assert path.exists()
        assert not path.with_suffix(".json.tmp").exists()
        assert JsonFileStorage(path).load() == '{"currency": "EUR", "lineItems": []}'

    def test_directory_uses_storage_key(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path)
        assert storage.path == tmp_path / "shoplessCart.json"

        storage.save("{}")
        storage.save('{"email": null}')
        assert storage.load() == '{"email": null}'
