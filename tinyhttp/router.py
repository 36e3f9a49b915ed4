"""
Таблица маршрутов и матчинг путей.

Шаблон пути — сегменты через "/", сегмент в фигурных скобках
({filename}) — параметр. Пустые сегменты выкидываются, так что
/users/ и /users — одно и то же.

Таблица заполняется один раз при старте и дальше только читается,
поэтому никаких локов.
"""
import re
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from tinyhttp.utils.http import HttpMethod, HttpRequest, HttpResponse, Route

RouteHandler = Callable[[HttpRequest], HttpResponse]

# {} без имени: не параметр
_DYNAMIC_SEGMENT = re.compile(r"\{.+\}")


def is_dynamic_segment(segment: str) -> bool:
    return _DYNAMIC_SEGMENT.fullmatch(segment) is not None


def split_path(path: str) -> List[str]:
    """
    /echo/abc?x=1 -> ["echo", "abc"]

    Query string отрезаем, пустые и пробельные сегменты выкидываем.
    """
    clean = path.split("?", 1)[0]
    return [part for part in clean.split("/") if part.strip()]


def match_route(method: HttpMethod, path: str, route: Route) -> bool:
    """Подходит ли конкретный запрос под маршрут."""
    if method != route.method:
        return False

    target_parts = split_path(path)
    route_parts = split_path(route.path)
    if len(target_parts) != len(route_parts):
        return False

    return all(
        is_dynamic_segment(route_part) or route_part == target_part
        for route_part, target_part in zip(route_parts, target_parts)
    )


def find_route(
    routes: Iterable[Route],
    method: HttpMethod,
    path: str,
) -> Optional[Route]:
    """
    Первый подходящий маршрут в порядке регистрации.

    Не нашли — None, это не ошибка.
    """
    for route in routes:
        if match_route(method, path, route):
            return route
    return None


def extract_route_args(path: str, route: Optional[Route]) -> Dict[str, str]:
    """
    Значения параметров пути.

    route: /echo/{arg1}/{arg2}, path: /echo/abc/xyz
    -> {"arg1": "abc", "arg2": "xyz"}

    Для route=None или несовпадающего пути — пустой dict.
    """
    if route is None:
        return {}

    target_parts = [part.strip() for part in split_path(path)]
    route_parts = [part.strip() for part in split_path(route.path)]
    if len(target_parts) != len(route_parts):
        return {}

    args: Dict[str, str] = {}
    for route_part, target_part in zip(route_parts, target_parts):
        if is_dynamic_segment(route_part):
            args[route_part[1:-1]] = target_part
        elif route_part != target_part:
            return {}
    return args


def routes_overlap(first: Route, second: Route) -> bool:
    """
    Может ли один и тот же запрос подойти под оба маршрута.

    /files/{name} и /files/{id} пересекаются,
    /files/{name} и /echo/{str} — нет.
    """
    if first.method != second.method:
        return False

    first_parts = split_path(first.path)
    second_parts = split_path(second.path)
    if len(first_parts) != len(second_parts):
        return False

    return all(
        is_dynamic_segment(a) or is_dynamic_segment(b) or a == b
        for a, b in zip(first_parts, second_parts)
    )


class RouteTable:
    """
    Упорядоченная таблица Route -> обработчик.

    Порядок регистрации = порядок поиска. Дубликаты и пересекающиеся
    шаблоны отклоняются сразу при регистрации, чтобы "first match"
    никогда не зависел от порядка.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Route, RouteHandler] = {}

    def register(self, route: Route, handler: RouteHandler) -> None:
        if route in self._handlers:
            raise ValueError(f"Duplicate route: {route}")

        for existing in self._handlers:
            if routes_overlap(existing, route):
                raise ValueError(f"Ambiguous route {route}, overlaps {existing}")

        self._handlers[route] = handler

    def find(self, method: HttpMethod, path: str) -> Optional[Route]:
        return find_route(self._handlers, method, path)

    def handler_for(self, route: Optional[Route]) -> Optional[RouteHandler]:
        if route is None:
            return None
        return self._handlers.get(route)

    @property
    def routes(self) -> Tuple[Route, ...]:
        """Маршруты в порядке регистрации."""
        return tuple(self._handlers)

    def __contains__(self, route: object) -> bool:
        return route in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
