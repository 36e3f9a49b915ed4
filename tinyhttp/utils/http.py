"""
Модель HTTP/1.1 сообщений.

Общие типы для всех компонентов:
- методы и статусы
- маршрут (method + шаблон пути)
- входящий запрос и исходящий ответ

Тут нет логики сети — только данные.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"


class InvalidMethodError(ValueError):
    """Токен метода не входит в HttpMethod."""


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def from_token(cls, token: str) -> "HttpMethod":
        """
        Метод из request line.

        На проводе регистр любой ("get", "Get"), внутри — всегда uppercase.
        Неизвестный токен — ошибка, а не новый вариант.
        """
        try:
            return cls(token.upper())
        except ValueError:
            raise InvalidMethodError(f"Invalid HTTP method: {token!r}") from None


class HttpStatus(Enum):
    """
    Закрытый набор статусов.

    Значение — код и reason phrase одной строкой, ровно так
    они попадают в status line. Новый статус = новый вариант.
    """
    OK = "200 OK"
    CREATED = "201 Created"
    BAD_REQUEST = "400 Bad Request"
    NOT_FOUND = "404 Not Found"
    SERVICE_UNAVAILABLE = "503 Service Unavailable"

    @property
    def code(self) -> int:
        """Числовой код для логов."""
        return int(self.value.split(" ", 1)[0])


@dataclass(frozen=True)
class Route:
    """
    Маршрут из таблицы роутинга.

    path — шаблон вида /files/{filename}. Равенство по методу
    и сырой строке шаблона, поэтому Route годится как ключ dict.
    """
    method: HttpMethod
    path: str

    def __str__(self) -> str:
        return f"{self.method.value} {self.path}"


@dataclass
class HttpRequest:
    """
    Распарсенный HTTP-запрос.

    Headers хранятся в lowercase, повторный заголовок перезаписывает
    предыдущий. route и route_args заполняются после роутинга,
    route=None значит "маршрут не найден".

    HttpRequest() без аргументов — пустой контекст для ответа 400,
    когда запрос не удалось разобрать.
    """
    method: Optional[HttpMethod] = None
    path: str = ""            # /echo/abc?x=1: как пришло, с query string
    version: str = HTTP_VERSION
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    route: Optional[Route] = None
    route_args: Dict[str, str] = field(default_factory=dict)

    @property
    def user_agent(self) -> Optional[str]:
        return self.headers.get("user-agent")

    @property
    def wants_close(self) -> bool:
        """Клиент прислал Connection: close (регистр не важен)?"""
        return self.headers.get("connection", "").lower() == "close"


@dataclass
class HttpResponse:
    """
    Ответ от обработчика маршрута.

    headers — дополнительные заголовки как их задал обработчик,
    регистр не трогаем. body — текст, в байты кодируется при записи.
    """
    status: HttpStatus
    content_type: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
