"""Loguru-based logger configuration for the booking service."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from ..config import Settings, settings as default_settings


class InterceptHandler(logging.Handler):
    """Route records from the standard logging module into loguru."""

    def emit(self, record: logging.LogRecord):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


class BookingLogger:
    """
    Loguru-based logger for the booking service.

    One instance per process. Sinks are configured on first use from the
    settings given, or the module settings when none are. Passing different
    settings later reconfigures the sinks.
    """

    _instance = None
    _configured = False

    def __new__(cls, settings: Optional[Settings] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings: Optional[Settings] = None):
        if not self._configured or (settings is not None and settings is not self.settings):
            self.settings = settings or default_settings
            self._setup_logger()
            BookingLogger._configured = True

    def _setup_logger(self):
        """Configure Loguru logger with console and file handlers."""
        logger.remove()

        if self.settings.debug:
            console_format = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>"
            )
            logger.add(
                sys.stdout,
                format=console_format,
                level=self.settings.effective_log_level,
                colorize=True,
                backtrace=True,
                diagnose=True
            )
        else:
            logger.add(
                sys.stderr,
                format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
                level=self.settings.effective_log_level,
            )

        if self.settings.log_to_file:
            log_dir = Path(self.settings.log_dir)
            log_dir.mkdir(exist_ok=True)
            log_path = log_dir / datetime.now().strftime("booking_%Y%m%d_%H%M%S.log")
            logger.add(
                log_path,
                format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}",
                level="DEBUG",
                rotation="50 MB",
                retention="10 days",
                compression="gz",
                serialize=not self.settings.debug,  # JSON lines outside debug mode
                backtrace=True,
                diagnose=self.settings.debug,
                enqueue=True
            )

        # Modules log through logging.getLogger(__name__)
        logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "asyncpg"):
            logging.getLogger(name).handlers = [InterceptHandler()]
            logging.getLogger(name).propagate = False

        logger.bind(
            debug_mode=self.settings.debug,
            log_level=self.settings.effective_log_level,
            verbose_logging=self.settings.verbose_logging
        ).debug("Booking service logging configured")

    def log_request(
        self,
        request_id: str,
        method: str,
        endpoint: str,
        headers: Dict[str, str],
        body: Any,
        query_params: Optional[Dict[str, str]] = None
    ):
        """Log incoming request."""
        log_data = {
            "request_id": request_id,
            "request_type": "incoming",
            "method": method,
            "endpoint": endpoint,
            "body": self._sanitize_body(body),
        }

        if self.settings.verbose_logging:
            log_data.update({
                "headers": self._sanitize_headers(headers),
                "query_params": query_params or {},
                "body_size": len(json.dumps(body)) if body else 0
            })

        logger.bind(**log_data).info(f"Request received: {method} {endpoint}")

    def log_response(
        self,
        request_id: str,
        status_code: int,
        headers: Dict[str, str],
        body: Any,
        duration_ms: float
    ):
        """Log outgoing response."""
        log_data = {
            "request_id": request_id,
            "request_type": "outgoing",
            "status_code": status_code,
            "duration_ms": duration_ms,
            "body": self._sanitize_body(body),
        }

        if self.settings.verbose_logging:
            log_data["headers"] = dict(headers)

        if status_code >= 500:
            log_level = "error"
        elif status_code >= 400:
            log_level = "warning"
        else:
            log_level = "info"

        getattr(logger.bind(**log_data), log_level)(
            f"Response sent - Status: {status_code} ({duration_ms:.1f}ms)"
        )

    def log_error(
        self,
        message: str,
        error: Optional[Exception] = None,
        **kwargs
    ):
        """Log an error."""
        if error:
            logger.bind(**kwargs).opt(exception=error).error(message)
        else:
            logger.bind(**kwargs).error(message)

    def log_warning(self, message: str, **kwargs):
        logger.bind(**kwargs).warning(message)

    def log_info(self, message: str, **kwargs):
        logger.bind(**kwargs).info(message)

    def log_debug(self, message: str, **kwargs):
        logger.bind(**kwargs).debug(message)

    def log_booking_operation(
        self,
        operation: str,
        input_data: Dict[str, Any],
        result: Dict[str, Any],
        duration_ms: float
    ):
        """Log a booking operation with summarized input and outcome."""
        log_data = {
            "operation": operation,
            "duration_ms": duration_ms,
            "input_summary": self._summarize_input(input_data),
            "result_summary": self._summarize_result(result)
        }
        logger.bind(**log_data).info(f"Booking operation completed: {operation} ({duration_ms:.1f}ms)")

    def _sanitize_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Remove sensitive information from headers."""
        sensitive_headers = {
            'authorization', 'cookie', 'x-api-key',
            'x-auth-token', 'x-csrf-token'
        }
        return {
            key: "***REDACTED***" if key.lower() in sensitive_headers else value
            for key, value in headers.items()
        }

    def _sanitize_body(self, body: Any) -> Any:
        """Remove sensitive information from request/response body."""
        if not body:
            return body

        sensitive_fields = {
            'password', 'hashed_pass', 'token', 'secret', 'api_key',
            'access_token', 'refresh_token'
        }

        if isinstance(body, dict):
            safe_body = {}
            for key, value in body.items():
                if any(sensitive in key.lower() for sensitive in sensitive_fields):
                    safe_body[key] = "***REDACTED***"
                elif isinstance(value, (dict, list)):
                    safe_body[key] = self._sanitize_body(value)
                else:
                    safe_body[key] = value
            return safe_body

        elif isinstance(body, list):
            return [self._sanitize_body(item) for item in body]

        return body

    def _summarize_input(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        summary = {}

        if 'guardian_id' in input_data:
            summary['guardian_id'] = str(input_data['guardian_id'])
        if 'dates' in input_data:
            summary['requested_days'] = len(input_data['dates'])
        if 'center_count' in input_data:
            summary['candidate_centers'] = input_data['center_count']
        if input_data.get('center_name'):
            summary['preferred_center'] = input_data['center_name']

        return summary

    def _summarize_result(self, result: Dict[str, Any]) -> Dict[str, Any]:
        summary = {}

        for key in ('booking_id', 'strategy', 'centers_used', 'total_days', 'success'):
            if key in result:
                summary[key] = str(result[key]) if key == 'booking_id' else result[key]
        if 'unavailable_dates' in result:
            summary['unavailable_count'] = len(result['unavailable_dates'])

        return summary


def get_logger(settings: Optional[Settings] = None) -> BookingLogger:
    """Get the booking logger instance, configuring loguru on first use."""
    return BookingLogger(settings)
