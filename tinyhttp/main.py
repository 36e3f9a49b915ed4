#!/usr/bin/env python3
"""
Точка входа для HTTP/1.1 сервера.

Запуск:
    python -m tinyhttp.main
    python -m tinyhttp.main --directory /tmp/files
    python -m tinyhttp.main --config config.yaml
"""
import argparse
import asyncio
import logging
import signal
from pathlib import Path

from tinyhttp.config import DEFAULT_PORT, ServerConfig
from tinyhttp.file_store import FileStore
from tinyhttp.handlers import build_route_table
from tinyhttp.http_server import HttpServer
from tinyhttp.logger import setup_logger


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Minimal HTTP/1.1 server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "-H", "--host",
        type=str,
        default="127.0.0.1",
        help="Listen host",
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=DEFAULT_PORT,
        help="Listen port",
    )
    parser.add_argument(
        "--directory",
        type=str,
        default=None,
        help="Root directory for /files/{filename}",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level",
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ServerConfig:
    """Загружает конфигурацию из файла или собирает из аргументов."""
    if args.config and Path(args.config).exists():
        config = ServerConfig.from_yaml(args.config)
    else:
        config = ServerConfig.default()
        config.listen_host = args.host
        config.listen_port = args.port
        config.log_level = args.log_level

    # --directory перекрывает и файл, и дефолт
    if args.directory:
        config.files_directory = Path(args.directory).absolute()
    return config


async def shutdown(server: HttpServer, sig: signal.Signals) -> None:
    """Graceful shutdown при получении сигнала."""
    logging.getLogger("tinyhttp").info(f"Received {sig.name}, shutting down...")
    await server.stop()

    # отменяем всё, что осталось (в том числе serve_forever)
    tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    for task in tasks:
        task.cancel()

    await asyncio.gather(*tasks, return_exceptions=True)


async def main() -> None:
    args = parse_args()

    setup_logger(args.log_level)
    logger = logging.getLogger("tinyhttp")

    config = load_config(args)
    logger.debug(f"Config loaded: {config}")

    # конфиг дальше не меняется: хранилище получает каталог один раз
    routes = build_route_table(FileStore(config.files_directory))
    server = HttpServer(config, routes)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda s=sig: asyncio.create_task(shutdown(server, s)),
        )

    try:
        await server.start()
    except asyncio.CancelledError:
        logger.info("Server shutdown complete")


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
