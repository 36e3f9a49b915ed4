"""
TCP-сервер для приёма клиентских соединений.

Использует asyncio.start_server() — низкоуровневый, но простой API.
Каждое соединение обрабатывается в отдельной задаче.
"""
import asyncio
import logging
from typing import Optional, Set

from tinyhttp.client_handler import handle_client
from tinyhttp.config import ServerConfig
from tinyhttp.router import RouteTable
from tinyhttp.logger import generate_trace_id, set_trace_id
from tinyhttp.response_writer import serialize_response
from tinyhttp.utils.http import HttpRequest, HttpResponse, HttpStatus

logger = logging.getLogger("tinyhttp")


class HttpServer:
    """
    Основной класс сервера.

    Принимает TCP-соединения, ограничивает их количество через семафор
    и делегирует обработку в handle_client().
    """

    def __init__(self, config: ServerConfig, routes: RouteTable):
        self.config = config
        self.routes = routes
        # семафор для ограничения одновременных клиентов
        self._client_semaphore = asyncio.Semaphore(config.limits.max_client_conns)
        self._server: Optional[asyncio.Server] = None
        self._connections: Set[asyncio.Task] = set()

    async def listen(self) -> None:
        """
        Биндит сокет и начинает принимать соединения, не блокируя.

        Для каждого нового соединения вызывается _handle_client_wrapper.
        """
        self._server = await asyncio.start_server(
            self._handle_client_wrapper,
            self.config.listen_host,
            self.config.listen_port,
            reuse_address=True,
        )

        logger.info(f"HTTP server started on {self.config.listen_host}:{self.port}")
        logger.info(f"Files directory: {self.config.files_directory}")
        logger.info(f"Routes: {[str(r) for r in self.routes.routes]}")

    async def start(self) -> None:
        """Запуск сервера, блокирует до stop()."""
        await self.listen()

        # serve_forever() блокирует до вызова close()
        async with self._server:
            await self._server.serve_forever()

    async def stop(self) -> None:
        """
        Корректная остановка.

        Сначала закрываем listening-сокет (новых клиентов нет),
        потом отменяем активные соединения и ждём, пока они выйдут.
        """
        if self._server is None:
            return

        logger.info("Stopping HTTP server...")
        self._server.close()

        connections = list(self._connections)
        for task in connections:
            task.cancel()
        await asyncio.gather(*connections, return_exceptions=True)

        await self._server.wait_closed()
        logger.info("HTTP server stopped")

    async def _handle_client_wrapper(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """
        Обёртка над handle_client с проверкой лимита.

        Если семафор locked() — все слоты заняты, сразу отдаём 503.
        """
        # у каждого соединения своя задача, значит и свой trace_id
        trace_id = generate_trace_id()
        set_trace_id(trace_id)

        if self._client_semaphore.locked():
            client_addr = writer.get_extra_info("peername")
            logger.warning(f"Connection rejected from {client_addr}: limit exceeded")
            try:
                writer.write(serialize_response(
                    HttpRequest(headers={"connection": "close"}),
                    HttpResponse(
                        status=HttpStatus.SERVICE_UNAVAILABLE,
                        headers={"X-Trace-Id": trace_id},
                    ),
                ))
                await writer.drain()
            except OSError as e:
                logger.debug(f"Failed to send 503 to {client_addr}: {e}")
            finally:
                writer.close()
            return

        task = asyncio.current_task()
        self._connections.add(task)
        try:
            async with self._client_semaphore:
                await handle_client(reader, writer, self.routes, self.config.timeouts)
        finally:
            self._connections.discard(task)

    @property
    def port(self) -> int:
        """Фактический порт (важно при listen_port=0)."""
        if self._server is None or not self._server.sockets:
            return self.config.listen_port
        return self._server.sockets[0].getsockname()[1]

    @property
    def active_connections(self) -> int:
        """Для отладки и тестов."""
        return len(self._connections)
