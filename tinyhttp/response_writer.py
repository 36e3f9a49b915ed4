"""
Сериализация HTTP-ответа в сокет.

HTTP/1.1 200 OK\r\n
Content-Type: text/plain\r\n
Content-Length: 5\r\n
\r\n
hello
"""
import asyncio
import logging
from typing import Dict, Mapping, Optional

from tinyhttp.compression import negotiate
from tinyhttp.utils.http import CRLF, HTTP_VERSION, HttpRequest, HttpResponse

logger = logging.getLogger("tinyhttp")


def build_response_headers(
    request: HttpRequest,
    response: HttpResponse,
    body_length: int,
    extra_headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Итоговый набор заголовков.

    Порядок важен — последующие перезаписывают предыдущие:
    Content-Type -> Content-Length -> заголовки обработчика
    -> Connection: close -> заголовки сжатия.
    """
    headers: Dict[str, str] = {}
    if response.content_type is not None:
        headers["Content-Type"] = response.content_type

    headers["Content-Length"] = str(body_length)
    headers.update(response.headers)

    if request.wants_close:
        headers["Connection"] = "close"

    if extra_headers:
        headers.update(extra_headers)
    return headers


def serialize_response(
    request: HttpRequest,
    response: HttpResponse,
) -> bytes:
    """Ответ целиком в байтах: status line, заголовки, тело."""
    original_body = response.body.encode("utf-8") if response.body is not None else None
    compression = negotiate(request.headers, original_body)

    body = compression.body if compression is not None else None
    headers = build_response_headers(
        request,
        response,
        body_length=len(body) if body is not None else 0,
        extra_headers=compression.headers if compression is not None else None,
    )

    head = f"{HTTP_VERSION} {response.status.value}{CRLF}"
    for name, value in headers.items():
        head += f"{name}: {value}{CRLF}"
    head += CRLF

    data = head.encode("latin-1")
    if body is not None:
        data += body
    return data


async def write_response(
    writer: asyncio.StreamWriter,
    request: HttpRequest,
    response: HttpResponse,
) -> int:
    """
    Отправляет ответ клиенту.

    Возвращает число отправленных байт (для access-лога), 0 если
    ничего не ушло. Ошибки сокета только логируем — клиент мог
    отвалиться в любой момент, это не повод ронять соединение.
    """
    if writer.is_closing():
        logger.debug("Not responding to closed connection")
        return 0

    data = serialize_response(request, response)
    try:
        writer.write(data)
        # drain() здесь вместо flush
        await writer.drain()

        if request.wants_close:
            writer.close()
            await writer.wait_closed()
    except ConnectionError as e:
        logger.warning(f"Client disconnected: {e}")
        return 0
    except OSError as e:
        logger.warning(f"IO error writing response: {e}")
        return 0
    return len(data)
