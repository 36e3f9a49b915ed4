"""
Таймаут простоя соединения.

asyncio.wait_for() кидает TimeoutError без деталей,
тут мы оборачиваем его с нормальным сообщением.
"""
import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


async def with_timeout(
    aw: Awaitable[T],
    timeout: float,
    operation: str = ""
) -> T:
    """
    Обёртка над wait_for с понятной ошибкой.

    Вместо голого TimeoutError получаем:
    "Timeout during reading request line after 5.0s"
    """
    try:
        return await asyncio.wait_for(aw, timeout=timeout)
    except asyncio.TimeoutError:
        raise TimeoutError(f"Timeout during {operation} after {timeout}s") from None
