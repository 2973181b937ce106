"""
日志系统配置
Centralised logging configuration and formatters.
"""
import sys
import logging
import json
from datetime import datetime
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path

from campaign_service.core.config import settings


class JSONFormatter(logging.Formatter):
    """JSON 格式日志格式化器，适用于日志聚合系统"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """彩色控制台日志格式化器"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


class AuditLogFilter(logging.Filter):
    """审计日志过滤器，只记录与安全/操作相关的日志"""

    AUDIT_KEYWORDS = [
        "auth",
        "token",
        "create",
        "update",
        "delete",
        "campaign",
        "preview",
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage().lower()
        return any(keyword in message for keyword in self.AUDIT_KEYWORDS)


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = True,
    log_to_console: bool = True,
    json_format: bool = False,
    log_dir: str = "logs",
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    配置全局日志系统

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_to_file: write rotating files under ``log_dir``
        log_to_console: emit to stdout
        json_format: one JSON object per line, for log aggregation
        max_bytes: size at which a log file is rotated
        backup_count: rotated files to keep
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # 清除现有处理器
    root_logger.handlers.clear()

    detailed_format = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"
    simple_format = "%(asctime)s - %(levelname)s - %(message)s"

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)

        if json_format:
            console_handler.setFormatter(JSONFormatter())
        elif sys.stdout.isatty():
            console_handler.setFormatter(ColoredFormatter(simple_format))
        else:
            console_handler.setFormatter(logging.Formatter(simple_format))

        root_logger.addHandler(console_handler)

    if log_to_file:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            path / "campaigns.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(detailed_format))
        root_logger.addHandler(file_handler)

        # 错误日志文件 (仅记录 ERROR 及以上)
        error_handler = RotatingFileHandler(
            path / "error.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(logging.Formatter(detailed_format))
        root_logger.addHandler(error_handler)

        audit_handler = TimedRotatingFileHandler(
            path / "audit.log",
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8"
        )
        audit_handler.setLevel(logging.INFO)
        audit_handler.setFormatter(logging.Formatter(detailed_format))
        audit_handler.addFilter(AuditLogFilter())
        root_logger.addHandler(audit_handler)

    # 设置第三方库的日志级别
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root_logger.info("Logging system initialized")


def init_logging():
    """在应用启动时调用"""
    setup_logging(
        level=settings.LOG_LEVEL,
        log_to_file=settings.LOG_TO_FILE,
        log_to_console=True,
        json_format=settings.JSON_LOGS,
        log_dir=settings.LOG_DIR,
    )
