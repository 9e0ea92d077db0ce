import logging
import logging.handlers
import os
import re
import sys
from functools import lru_cache
from typing import Any, Optional

from config import get_config

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(funcName)s - %(message)s'

DEFAULT_TOKEN_PREFIX = "MS-RX-P"

# uvicorn installs its own handlers on these and stops propagation to root
UVICORN_LOGGERS = ('uvicorn.access', 'uvicorn.error')

@lru_cache()
def _issued_token_pattern(prefix: str) -> "re.Pattern":
    # Whole token up to the next character that cannot be part of one, last four kept
    return re.compile(
        r"(?<![A-Za-z0-9-])" + re.escape(prefix) + r"[A-Za-z0-9-]*?([A-Za-z0-9-]{4})(?![A-Za-z0-9-])"
    )

def mask_tokens(text: str, prefix: str = DEFAULT_TOKEN_PREFIX) -> str:
    """Keep only the last four characters of any issued prescription token.

    Issued tokens are bearer capabilities; demo tokens are public and left alone.
    """
    return _issued_token_pattern(prefix).sub(lambda m: prefix + "…" + m.group(1), text)

class TokenMaskingFilter(logging.Filter):
    """Masks prescription tokens in the message and its arguments.

    Arguments are masked one by one rather than pre-formatted, since uvicorn's
    access formatter unpacks ``record.args`` itself.
    """

    def __init__(self, prefix: str = DEFAULT_TOKEN_PREFIX):
        super().__init__()
        self.prefix = prefix

    def _mask(self, value: Any) -> Any:
        return mask_tokens(value, self.prefix) if isinstance(value, str) else value

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._mask(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(self._mask(arg) for arg in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._mask(arg) for key, arg in record.args.items()}
        return True

def _tag(handler: logging.Handler, level: int, fmt: str, token_prefix: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    handler.addFilter(TokenMaskingFilter(token_prefix))
    # Marks handlers owned by this module so a re-run replaces only these
    handler._medsight = True
    return handler

def _mask_uvicorn_loggers(token_prefix: str) -> None:
    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        for existing in [f for f in uvicorn_logger.filters if isinstance(f, TokenMaskingFilter)]:
            uvicorn_logger.removeFilter(existing)
        uvicorn_logger.addFilter(TokenMaskingFilter(token_prefix))

def _rotating_file_handler(path: str) -> logging.Handler:
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )

def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    enable_console: bool = True
) -> None:
    """Configure root logging for the API process"""
    config = get_config()
    level_name = (log_level or config.app.log_level).upper()
    log_file = log_file or config.app.log_file
    level = getattr(logging, level_name, logging.INFO)
    token_prefix = config.tokens.token_prefix

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in [h for h in root_logger.handlers if getattr(h, "_medsight", False)]:
        root_logger.removeHandler(handler)

    if enable_console:
        root_logger.addHandler(_tag(logging.StreamHandler(sys.stdout), level, CONSOLE_FORMAT, token_prefix))
    if log_file:
        root_logger.addHandler(_tag(_rotating_file_handler(log_file), level, FILE_FORMAT, token_prefix))

    _mask_uvicorn_loggers(token_prefix)

    # Outbound HTTP libraries log every request at INFO
    for noisy in ('httpx', 'httpcore', 'asyncio'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured - Level: {level_name}, File: {log_file or 'None'}")

class RequestLogger:
    """One log line per API request, level chosen by response status"""

    def __init__(self, logger_name: str = "medsight.requests"):
        self.logger = logging.getLogger(logger_name)

    async def log_request(self, request, response, duration: float):
        entry = {
            "method": request.method,
            "path": mask_tokens(request.url.path),
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
            "client_ip": request.client.host if request.client else "unknown"
        }

        if response.status_code >= 500:
            self.logger.error(f"Server error: {entry}")
        elif response.status_code >= 400:
            self.logger.warning(f"Client error: {entry}")
        else:
            self.logger.info(f"Request: {entry}")

class PerformanceLogger:
    """Timings for calls to the EMR and the text generation providers"""

    def __init__(self, logger_name: str = "medsight.performance"):
        self.logger = logging.getLogger(logger_name)

    def log_emr_request(self, method: str, url: str, duration: float, status_code: Optional[int] = None):
        status_info = f" (HTTP {status_code})" if status_code else ""
        self.logger.info(f"EMR {method} ({duration:.3f}s){status_info}: {url}")

    def log_ai_request(self, provider: str, duration: float, success: bool):
        outcome = "ok" if success else "failed"
        self.logger.info(f"AI {provider} ({duration:.3f}s): {outcome}")
