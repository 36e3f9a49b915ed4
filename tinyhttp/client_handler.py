"""
Обработка клиентского соединения.

Цикл на одном сокете:
- читаем и парсим запрос
- ищем маршрут, вызываем обработчик
- пишем ответ
- решаем, держать ли соединение (keep-alive) или закрыть

Запросы внутри соединения строго последовательны: следующий
не читается, пока ответ на текущий не записан.
"""
import asyncio
import logging

from tinyhttp.config import TimeoutConfig
from tinyhttp.logger import log_request
from tinyhttp.request_parser import EmptyRequest, RequestParseError, parse_request
from tinyhttp.response_writer import write_response
from tinyhttp.router import RouteTable
from tinyhttp.utils.http import HttpRequest, HttpResponse, HttpStatus, InvalidMethodError

logger = logging.getLogger("tinyhttp")


def should_close_connection(request: HttpRequest) -> bool:
    """Connection: close в любом регистре."""
    return request.wants_close


async def handle_exchange(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    routes: RouteTable,
    timeouts: TimeoutConfig,
) -> bool:
    """
    Один обмен запрос/ответ.

    Возвращает True, если соединение можно использовать дальше.
    Ошибки разбора и таймауты летят наружу — их разбирает handle_client.
    """
    request = await parse_request(reader, routes, timeouts.read)
    should_close = should_close_connection(request)

    with log_request(logger, request.method.value, request.path) as log:
        handler = routes.handler_for(request.route)

        if handler is None:
            logger.debug(f"Route not found: {request.method.value} {request.path}")
            log.status = HttpStatus.NOT_FOUND.code
            log.bytes_sent = await write_response(
                writer, request, HttpResponse(status=HttpStatus.NOT_FOUND)
            )
            if should_close and not writer.is_closing():
                writer.close()
            return not should_close

        # обработчики синхронные и могут ходить в файловую систему,
        # поэтому крутим их в пуле потоков
        response = await asyncio.to_thread(handler, request)
        log.status = response.status.code
        log.bytes_sent = await write_response(writer, request, response)

    return not should_close


async def handle_client(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    routes: RouteTable,
    timeouts: TimeoutConfig,
) -> None:
    """
    Обслуживает одно соединение до закрытия.

    - таймаут простоя -> молча закрываем
    - I/O ошибка -> логируем и закрываем
    - ошибка разбора -> 400 с пустым контекстом и закрываем
    - любое другое исключение -> закрываем без ответа
    """
    client_addr = writer.get_extra_info("peername")
    logger.info(f"Accepted connection from {client_addr}")
    exchanges = 0

    try:
        keep_alive = True
        while keep_alive and not writer.is_closing():
            try:
                keep_alive = await handle_exchange(reader, writer, routes, timeouts)
                exchanges += 1
            except TimeoutError as e:
                # TimeoutError: тоже OSError, ловим раньше
                logger.info(f"[{client_addr}] Socket timeout, closing connection: {e}")
                break
            except OSError as e:
                logger.warning(f"[{client_addr}] IO error: {e}")
                break

    except EmptyRequest:
        if exchanges:
            # клиент закрыл keep-alive соединение между запросами
            logger.debug(f"[{client_addr}] Client closed connection")
        else:
            logger.warning(f"[{client_addr}] Bad request: empty request")
            await write_response(writer, HttpRequest(), HttpResponse(status=HttpStatus.BAD_REQUEST))
    except (RequestParseError, InvalidMethodError) as e:
        logger.warning(f"[{client_addr}] Bad request: {e}")
        await write_response(writer, HttpRequest(), HttpResponse(status=HttpStatus.BAD_REQUEST))
    except asyncio.CancelledError:
        logger.debug(f"[{client_addr}] Connection cancelled")
        raise
    except Exception as e:
        logger.exception(f"[{client_addr}] Unexpected error: {e}")
    finally:
        # всегда закрываем соединение с клиентом
        try:
            writer.close()
            await writer.wait_closed()
        except OSError:
            pass  # уже закрыт или сломался: ок
        logger.info(f"[{client_addr}] Closed connection")
