"""
Общие фикстуры для тестов.

Асинхронный код гоняем через asyncio.run() из обычных тестов.
StreamReader создаём только внутри корутины — ему нужен запущенный loop.
"""
import asyncio
import gzip
from typing import Dict, List, Optional, Tuple

import pytest

from tinyhttp.config import TimeoutConfig
from tinyhttp.handlers import build_route_table


class FakeWriter:
    """
    Заглушка asyncio.StreamWriter.

    Копит всё записанное в buffer; fail_with — исключение,
    которое вылетит из write() (имитация обрыва соединения).
    """

    def __init__(self, peername=("127.0.0.1", 50000), fail_with: Optional[Exception] = None):
        self.buffer = bytearray()
        self.closed = False
        self.close_calls = 0
        self._peername = peername
        self._fail_with = fail_with

    def write(self, data: bytes) -> None:
        if self._fail_with is not None:
            raise self._fail_with
        self.buffer.extend(data)

    async def drain(self) -> None:
        pass

    def is_closing(self) -> bool:
        return self.closed

    def close(self) -> None:
        self.closed = True
        self.close_calls += 1

    async def wait_closed(self) -> None:
        pass

    def get_extra_info(self, name, default=None):
        return self._peername if name == "peername" else default


class RecordingStore:
    """Хранилище в памяти, запоминает вызовы create_and_write."""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = dict(files or {})
        self.writes: List[Tuple[str, str]] = []

    def exists(self, filename: str) -> bool:
        return filename in self.files

    def read_text(self, filename: str) -> str:
        return self.files[filename]

    def create_and_write(self, filename: str, content: str) -> None:
        if filename in self.files:
            raise FileExistsError(filename)
        self.writes.append((filename, content))
        self.files[filename] = content


def make_reader(data: bytes, eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


def split_responses(raw: bytes) -> List[Tuple[str, Dict[str, str], bytes]]:
    """
    Разбирает поток ответов по Content-Length.

    Возвращает [(status_line, headers_lowercase, body), ...]
    """
    responses = []
    while raw:
        head, _, rest = raw.partition(b"\r\n\r\n")
        lines = head.decode("latin-1").split("\r\n")
        headers = {}
        for line in lines[1:]:
            name, _, value = line.partition(":")
            headers[name.strip().lower()] = value.strip()
        length = int(headers.get("content-length", "0"))
        responses.append((lines[0], headers, rest[:length]))
        raw = rest[length:]
    return responses


def decode_body(headers: Dict[str, str], body: bytes) -> str:
    if headers.get("content-encoding") == "gzip":
        body = gzip.decompress(body)
    return body.decode("utf-8")


@pytest.fixture
def fake_writer() -> FakeWriter:
    return FakeWriter()


@pytest.fixture
def writer_factory():
    return FakeWriter


@pytest.fixture
def reader_factory():
    return make_reader


@pytest.fixture
def response_splitter():
    return split_responses


@pytest.fixture
def body_decoder():
    return decode_body


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore({"existing.txt": "old content"})


@pytest.fixture
def routes(store):
    return build_route_table(store)


@pytest.fixture
def timeouts() -> TimeoutConfig:
    return TimeoutConfig(read_ms=1000)


@pytest.fixture
def run():
    """Запускает корутину до конца в новом event loop."""
    return asyncio.run
