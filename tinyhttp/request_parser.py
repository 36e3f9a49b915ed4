"""
Парсер HTTP/1.1 запросов из потока.

Формат:
GET /path HTTP/1.1\r\n
Host: example.com\r\n
Content-Length: 42\r\n
\r\n
<body>

Маршрут ищется сразу после request line, но заголовки и тело
читаются в любом случае — поток должен быть вычитан целиком,
иначе следующий запрос на keep-alive соединении сломается.
"""
import asyncio
from typing import Dict, NamedTuple, Optional, Tuple

from tinyhttp.router import RouteTable, extract_route_args
from tinyhttp.timeouts import with_timeout
from tinyhttp.utils.http import HttpMethod, HttpRequest

# 16KB на одно чтение тела
CHUNK_SIZE = 16 * 1024


class RequestParseError(Exception):
    """Базовая ошибка разбора запроса — клиенту уходит 400."""


class EmptyRequest(RequestParseError):
    pass


class MalformedRequestLine(RequestParseError):
    pass


class InvalidHttpVersion(RequestParseError):
    pass


class InvalidHeaderFormat(RequestParseError):
    pass


class EmptyHeaderName(RequestParseError):
    pass


class InvalidContentLength(RequestParseError):
    pass


class FailedToReadRequest(RequestParseError):
    """Обёртка над I/O ошибками чтения (исходная в __cause__)."""


class RequestLine(NamedTuple):
    method: HttpMethod
    target: str
    version: str


async def _read_line(
    reader: asyncio.StreamReader,
    timeout: float,
    operation: str,
) -> Optional[str]:
    """
    Одна строка без \r\n или None в конце потока.

    TimeoutError пробрасываем как есть — это не ошибка разбора,
    соединение просто закрывается.
    """
    try:
        raw = await with_timeout(reader.readline(), timeout, operation)
    except TimeoutError:
        raise
    except (OSError, ValueError) as e:
        # ValueError: строка длиннее лимита StreamReader
        raise FailedToReadRequest("Failed to read request") from e

    if not raw:
        return None
    # latin-1: стандартная кодировка для HTTP/1.x headers
    return raw.decode("latin-1").rstrip("\r\n")


def parse_request_line(line: str) -> RequestLine:
    """
    GET /path HTTP/1.1 -> RequestLine.

    Ровно три токена через одиночный пробел. Версия проверяется
    только по префиксу HTTP/. Неизвестный метод — InvalidMethodError.
    """
    parts = line.strip().split(" ")
    if len(parts) != 3:
        raise MalformedRequestLine(f"Invalid request line: {line!r}")

    method, target, version = parts
    if not version.startswith("HTTP/"):
        raise InvalidHttpVersion(f"Invalid HTTP version: {version!r}")

    return RequestLine(HttpMethod.from_token(method), target, version)


def parse_header_line(line: str) -> Tuple[str, str]:
    """Host: example.com -> ("host", "example.com")"""
    name, sep, value = line.partition(":")
    if not sep:
        raise InvalidHeaderFormat(f"Invalid header format: {line!r}")

    name = name.strip().lower()
    if not name:
        raise EmptyHeaderName(f"Empty header name: {line!r}")

    return name, value.strip()


async def parse_headers(reader: asyncio.StreamReader, timeout: float) -> Dict[str, str]:
    """Читает заголовки до пустой строки или конца потока."""
    headers: Dict[str, str] = {}
    while True:
        line = await _read_line(reader, timeout, "reading header")
        if line is None or not line.strip():
            break
        name, value = parse_header_line(line)
        headers[name] = value
    return headers


def parse_content_length(value: str) -> int:
    # только ASCII-цифры: "+5", "1_0" и отрицательная длина дают 400
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        raise InvalidContentLength(f"Invalid content-length: {value!r}")
    return int(value)


async def parse_body(
    reader: asyncio.StreamReader,
    length: int,
    timeout: float,
) -> str:
    """
    Читает ровно length байт тела.

    Content-Length — это байты на проводе, декодируем уже после.
    Таймаут на каждый чанк, а не на всё тело: медленная, но живая
    загрузка не обрывается.
    """
    chunks = []
    remaining = length
    while remaining > 0:
        try:
            chunk = await with_timeout(
                reader.read(min(CHUNK_SIZE, remaining)),
                timeout,
                "reading body chunk"
            )
        except TimeoutError:
            raise
        except OSError as e:
            raise FailedToReadRequest("Failed to read request body") from e
        if not chunk:
            raise FailedToReadRequest("Client disconnected while sending body")

        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks).decode("utf-8", errors="replace")


async def parse_request(
    reader: asyncio.StreamReader,
    routes: RouteTable,
    timeout: float,
) -> HttpRequest:
    """
    Парсит один запрос целиком: request line, заголовки, тело.

    timeout — простой на каждом отдельном чтении, а не на весь запрос.
    """
    line = await _read_line(reader, timeout, "reading request line")
    if line is None:
        raise EmptyRequest("Empty request")

    method, target, version = parse_request_line(line)
    route = routes.find(method, target)

    headers = await parse_headers(reader, timeout)

    body = None
    if "content-length" in headers:
        length = parse_content_length(headers["content-length"])
        body = await parse_body(reader, length, timeout)

    return HttpRequest(
        method=method,
        path=target,
        version=version,
        headers=headers,
        body=body,
        route=route,
        route_args=extract_route_args(target, route),
    )
