"""
Сжатие тела ответа.

Поддерживается только gzip. q-параметры из Accept-Encoding
игнорируем — берём первую поддерживаемую кодировку из списка клиента.
Неподдерживаемая кодировка — не ошибка, просто отдаём как есть.
"""
import gzip
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


class GzipCompression:
    encoding = "gzip"

    def compress(self, body: bytes) -> bytes:
        # одним куском, без стриминга; mtime=0: одинаковый вход даёт одинаковый выход
        return gzip.compress(body, mtime=0)


SUPPORTED_COMPRESSIONS = {
    GzipCompression.encoding: GzipCompression(),
}


@dataclass
class CompressionResult:
    """
    Тело для отправки + заголовки, которые нужно добавить.

    Пустой headers — тело ушло без сжатия.
    """
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)


def select_compression(accept_encoding: str) -> Optional[GzipCompression]:
    """
    "deflate, gzip;q=0.5, br" -> GzipCompression

    Токен с параметрами ("gzip;q=0.5") целиком не совпадает
    с "gzip" и пропускается.
    """
    for token in accept_encoding.split(","):
        strategy = SUPPORTED_COMPRESSIONS.get(token.strip().lower())
        if strategy is not None:
            return strategy
    return None


def negotiate(
    request_headers: Mapping[str, str],
    body: Optional[bytes],
) -> Optional[CompressionResult]:
    """
    Решает, как отправить тело.

    - нет тела или оно пустое -> None (нечего отправлять)
    - нет accept-encoding или кодировка не поддерживается -> тело как есть
    - gzip -> сжатое тело + Content-Encoding: gzip
    """
    if not body:
        return None

    accept_encoding = request_headers.get("accept-encoding")
    if accept_encoding is None:
        return CompressionResult(body=body)

    strategy = select_compression(accept_encoding)
    if strategy is None:
        return CompressionResult(body=body)

    return CompressionResult(
        body=strategy.compress(body),
        headers={"Content-Encoding": strategy.encoding},
    )
