"""
Обработчики маршрутов.

Контракт: запрос -> готовый HttpResponse. Ожидаемые ошибки
валидации (пустой аргумент, файл уже есть) — это 4xx-ответ,
а не исключение. Исключение = что-то реально сломалось,
соединение будет закрыто.
"""
import logging
from functools import partial
from typing import Optional

from tinyhttp.file_store import FileStore
from tinyhttp.router import RouteTable
from tinyhttp.utils.http import HttpMethod, HttpRequest, HttpResponse, HttpStatus, Route

logger = logging.getLogger("tinyhttp")


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def root(request: HttpRequest) -> HttpResponse:
    return HttpResponse(status=HttpStatus.OK)


def echo(request: HttpRequest) -> HttpResponse:
    """GET /echo/{str} — возвращает аргумент как text/plain."""
    value = request.route_args.get("str")
    if _is_blank(value):
        return HttpResponse(status=HttpStatus.BAD_REQUEST)

    return HttpResponse(status=HttpStatus.OK, content_type="text/plain", body=value)


def user_agent(request: HttpRequest) -> HttpResponse:
    """GET /user-agent — возвращает заголовок User-Agent."""
    value = request.user_agent
    if _is_blank(value):
        return HttpResponse(status=HttpStatus.BAD_REQUEST)

    return HttpResponse(status=HttpStatus.OK, content_type="text/plain", body=value)


def read_file(request: HttpRequest, store: FileStore) -> HttpResponse:
    filename = request.route_args.get("filename")
    if _is_blank(filename):
        return HttpResponse(status=HttpStatus.BAD_REQUEST)

    if not store.exists(filename):
        return HttpResponse(status=HttpStatus.NOT_FOUND)

    return HttpResponse(
        status=HttpStatus.OK,
        content_type="application/octet-stream",
        body=store.read_text(filename),
    )


def publish_file(request: HttpRequest, store: FileStore) -> HttpResponse:
    """
    POST /files/{filename} — создаёт файл с телом запроса.

    Существующий файл не перезаписываем — 400 и никакой записи.
    """
    filename = request.route_args.get("filename")
    if _is_blank(filename):
        logger.info("Filename is blank, bad request")
        return HttpResponse(status=HttpStatus.BAD_REQUEST)

    if _is_blank(request.body):
        logger.info("Body is blank, bad request")
        return HttpResponse(status=HttpStatus.BAD_REQUEST)

    if store.exists(filename):
        logger.info(f"File {filename} already exists, bad request")
        return HttpResponse(status=HttpStatus.BAD_REQUEST)

    store.create_and_write(filename, request.body)
    return HttpResponse(status=HttpStatus.CREATED)


def build_route_table(store: FileStore) -> RouteTable:
    """Таблица маршрутов сервера, порядок регистрации = порядок поиска."""
    table = RouteTable()
    table.register(Route(HttpMethod.GET, "/"), root)
    table.register(Route(HttpMethod.GET, "/echo/{str}"), echo)
    table.register(Route(HttpMethod.GET, "/user-agent"), user_agent)
    table.register(Route(HttpMethod.GET, "/files/{filename}"), partial(read_file, store=store))
    table.register(Route(HttpMethod.POST, "/files/{filename}"), partial(publish_file, store=store))
    return table
