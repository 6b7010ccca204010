"""Centralized logging configuration for PaperTrader.

structlog events are rendered by stdlib handlers through
structlog.stdlib.ProcessorFormatter, so libraries that log via the stdlib
(SQLAlchemy, yfinance) share the same console and file output.

Event names are dotted and the first segment names the domain
("ledger.trade.executed", "market_data.quote.failed"); the console shows
that domain as a label.
"""

import inspect
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_LOG_FILE = Path("logs/papertrader.log")

# strftime patterns; "{cs}" becomes centiseconds, None means ISO-8601
TIMESTAMP_FORMATS: dict[str, str | None] = {
    "iso": None,
    "compact": "%y%m%d-%H%M%S.{cs}",
    "time": "%H:%M:%S.{cs}",
    "short": "%m%dT%H%M%S",
}

DOMAIN_LABELS = {
    "ledger": "Ledger",
    "sql_store": "Store",
    "market_data": "Market",
    "chart": "Chart",
    "trading_desk": "Desk",
}

_RESET = "\033[0m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_GRAY = "\033[90m"
_CYAN = "\033[36m"

_LEVEL_COLOURS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}

# Added by the processor chain, not by callers
_CHAIN_KEYS = frozenset({"log_timestamp", "level", "event", "filename", "lineno", "logger"})


class LoggingConfig(BaseModel):
    """Configuration for logging system.

    What each level shows:

    DEBUG: quote/history fetches, chart builds, store initialization
    INFO: accounts opened, trades executed
    WARNING: trade rejections, quotes skipped while pricing a summary
    ERROR: storage failures

    Timestamp formats:
    - "iso": 2025-10-22T20:50:07.288824+00:00
    - "compact": 251022-205007.28
    - "time": 20:50:07.28
    - "short": 1022T205007
    """

    level: LogLevel = Field(default="INFO", description="Minimum console log level")
    format: Literal["console", "json"] = Field(default="console", description="Coloured text or JSON on the console")
    timestamp_format: Literal["iso", "compact", "time", "short"] = Field(
        default="compact", description="How log_timestamp is written"
    )
    enable_file: bool = Field(default=False, description="Also write JSON lines to a file")
    file_path: Path | None = Field(default=None, description=f"Log file (default: {DEFAULT_LOG_FILE})")
    file_level: LogLevel = Field(default="WARNING", description="Minimum level written to the file")
    file_rotation: bool = Field(default=True, description="Rotate the file by size")
    max_file_size_mb: int = Field(default=10, ge=1, description="Rotation threshold in MB")
    backup_count: int = Field(default=3, ge=0, description="Rotated files kept")


def _timestamper(fmt: str):
    """Stamp events under 'log_timestamp' so a 'timestamp' field stays the caller's."""
    pattern = TIMESTAMP_FORMATS[fmt]

    def stamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        if pattern is None:
            event_dict["log_timestamp"] = now.isoformat()
        else:
            event_dict["log_timestamp"] = now.strftime(pattern.replace("{cs}", f"{now.microsecond // 10000:02d}"))
        return event_dict

    return stamp


def _pre_chain(timestamp_format: str) -> list[Any]:
    """Processors shared by structlog events and foreign stdlib records."""
    callsite = structlog.processors.CallsiteParameter
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _timestamper(timestamp_format),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.CallsiteParameterAdder([callsite.FILENAME, callsite.LINENO]),
    ]


class _ConsoleFormatter:
    """Lays out one event as: time [level] Domain message | k=v ... (logger:line)"""

    @staticmethod
    def format(
        event: str,
        event_dict: dict[str, Any],
        level: str,
        timestamp: str,
        filename: str,
        lineno: Any,
        logger_name: str,
    ) -> str:
        level = level.upper()
        colour = _LEVEL_COLOURS.get(level, _RESET)

        domain, _, rest = event.partition(".")
        label = DOMAIN_LABELS.get(domain) if rest else None
        message = rest.replace(".", " ").replace("_", " ") if label else event

        parts = [f"{_DIM}{timestamp}{_RESET}", f"[{colour}{level.lower()}{_RESET}]"]
        if label:
            parts.append(f"{colour}{label}{_RESET}")
        parts.append(f"{_BOLD}{message}{_RESET}")

        pairs = " ".join(
            f"{key}={_CYAN}{value}{_RESET}" for key, value in sorted(event_dict.items()) if not key.startswith("_")
        )
        if pairs:
            parts.append(f"{_GRAY}|{_RESET} {pairs}")

        if lineno:
            where = logger_name or Path(filename).stem
            parts.append(f"{_GRAY}({where}:{lineno}){_RESET}")

        return " ".join(parts)


def _render_console(logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    context = {k: v for k, v in event_dict.items() if k not in _CHAIN_KEYS}
    return _ConsoleFormatter.format(
        event=str(event_dict.get("event", "")),
        event_dict=context,
        level=str(event_dict.get("level", "info")),
        timestamp=str(event_dict.get("log_timestamp", "")),
        filename=str(event_dict.get("filename", "")),
        lineno=event_dict.get("lineno"),
        logger_name=str(event_dict.get("logger") or ""),
    )


def _formatter(renderer: Any, pre_chain: list[Any]) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=pre_chain,
    )


def _build_file_handler(config: LoggingConfig, path: Path, pre_chain: list[Any]) -> logging.Handler:
    """JSON-lines file handler, size-rotated when enabled."""
    path.parent.mkdir(parents=True, exist_ok=True)

    handler: logging.Handler
    if config.file_rotation:
        handler = RotatingFileHandler(
            filename=str(path),
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    else:
        handler = logging.FileHandler(filename=str(path), encoding="utf-8")

    handler.setLevel(config.file_level)
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer(), pre_chain))
    return handler


class LoggerFactory:
    """
    Hands out structlog loggers bound to the PaperTrader configuration.

    The CLI calls configure() after loading the system config; get_logger()
    falls back to defaults when nothing configured logging first.

    Example:
        >>> LoggerFactory.configure(LoggingConfig(level="DEBUG"))
        >>> logger = LoggerFactory.get_logger()
        >>> logger.info("ledger.trade.executed", account_id="alice", symbol="AAPL", quantity=10)
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        Install the console handler (plus a file handler if enabled) and configure structlog.

        Args:
            config: Logging settings, defaults when None
        """
        config = config or LoggingConfig()
        if config.enable_file and config.file_path is None:
            config = config.model_copy(update={"file_path": DEFAULT_LOG_FILE})

        pre_chain = _pre_chain(config.timestamp_format)
        console_mode = config.format == "console"

        console = logging.StreamHandler(stream=sys.stderr)
        console.setLevel(config.level)
        console.setFormatter(
            _formatter(_render_console if console_mode else structlog.processors.JSONRenderer(), pre_chain)
        )
        handlers: list[logging.Handler] = [console]

        threshold = logging.getLevelName(config.level)
        if config.enable_file and config.file_path is not None:
            handlers.append(_build_file_handler(config, config.file_path, pre_chain))
            threshold = min(threshold, logging.getLevelName(config.file_level))

        logging.basicConfig(level=threshold, handlers=handlers, force=True)

        exc_processor: Any = (
            structlog.processors.ExceptionRenderer(structlog.dev.plain_traceback)  # type: ignore[arg-type]
            if console_mode
            else structlog.processors.format_exc_info
        )
        structlog.configure(
            processors=[*pre_chain, exc_processor, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        cls._config = config
        cls._configured = True

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Return a logger, configuring defaults on first use.

        Args:
            name: Logger name; the calling module's __name__ when omitted
        """
        if not cls._configured:
            cls.configure()

        if name is None:
            frame = inspect.currentframe()
            caller = frame.f_back if frame else None
            name = caller.f_globals.get("__name__", "papertrader") if caller else "papertrader"

        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        """Active configuration, or defaults before configure()."""
        return cls._config or LoggingConfig()

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Drop handlers and configuration so tests start clean."""
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(logging.NOTSET)
        structlog.reset_defaults()
        cls._config = None
        cls._configured = False
