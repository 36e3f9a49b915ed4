"""
Файлы для маршрутов /files/{filename}.

Имя файла резолвится относительно base_directory. Защиты от
path traversal и создания каталогов тут нет.
"""
from pathlib import Path
from typing import Union


class FileStore:

    def __init__(self, base_directory: Union[str, Path]):
        self._base_directory = Path(base_directory)

    @property
    def base_directory(self) -> Path:
        return self._base_directory

    def path_for(self, filename: str) -> Path:
        return self._base_directory / filename

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).exists()

    def read_text(self, filename: str) -> str:
        with open(self.path_for(filename), "r", encoding="utf-8", newline="") as f:
            return f.read()

    def create_and_write(self, filename: str, content: str) -> None:
        """Создаёт новый файл; если он уже есть — FileExistsError."""
        # newline="": пишем тело байт в байт, без перевода \n
        with open(self.path_for(filename), "x", encoding="utf-8", newline="") as f:
            f.write(content)
