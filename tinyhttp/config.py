"""
Конфигурация сервера.

Все настройки описаны как dataclasses — это проще Pydantic
и не тянет лишние зависимости.

Конфиг создаётся один раз до старта сервера и дальше не меняется.
"""
from dataclasses import dataclass, field
from pathlib import Path
import yaml

DEFAULT_PORT = 4221


@dataclass
class TimeoutConfig:
    """
    Таймауты.

    Храним в миллисекундах (так удобнее в конфиге),
    но properties возвращают секунды для asyncio.wait_for()
    """
    read_ms: int = 5000     # простой на одном чтении из сокета

    @property
    def read(self) -> float:
        return self.read_ms / 1000


@dataclass
class LimitsConfig:
    """Лимиты на количество соединений."""
    max_client_conns: int = 1000    # сколько клиентов держим одновременно


@dataclass
class ServerConfig:
    """
    Корневой конфиг приложения.

    Можно создать через from_yaml() или default() для разработки.
    """
    listen_host: str = "127.0.0.1"
    listen_port: int = DEFAULT_PORT
    # корень для /files/{filename}
    files_directory: Path = field(default_factory=lambda: Path.cwd())
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    log_level: str = "info"

    @classmethod
    def from_yaml(cls, path: str) -> "ServerConfig":
        """
        Парсит YAML-конфиг.

        listen: "127.0.0.1:4221"
        files_directory: /tmp/files
        timeouts:
          read_ms: 5000
        limits:
          max_client_conns: 1000
        logging:
          level: info
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        # listen может быть "127.0.0.1:4221" или просто "0.0.0.0"
        listen = str(data.get("listen", f"127.0.0.1:{DEFAULT_PORT}"))
        if ":" in listen:
            host, port = listen.rsplit(":", 1)  # rsplit на случай IPv6
            listen_host = host
            listen_port = int(port)
        else:
            listen_host = listen
            listen_port = DEFAULT_PORT

        files_directory = data.get("files_directory")

        timeouts_data = data.get("timeouts", {})
        timeouts = TimeoutConfig(
            read_ms=timeouts_data.get("read_ms", 5000),
        )

        limits_data = data.get("limits", {})
        limits = LimitsConfig(
            max_client_conns=limits_data.get("max_client_conns", 1000),
        )

        return cls(
            listen_host=listen_host,
            listen_port=listen_port,
            files_directory=Path(files_directory).absolute() if files_directory else Path.cwd(),
            timeouts=timeouts,
            limits=limits,
            log_level=data.get("logging", {}).get("level", "info"),
        )

    @classmethod
    def default(cls) -> "ServerConfig":
        """Дефолтный конфиг для локальной разработки."""
        return cls()
