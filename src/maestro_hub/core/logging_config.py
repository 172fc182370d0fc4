"""
Structured logging configuration for the aggregation layer.

JSON logs in production, colorized human-readable logs in development.
Provider events (failures, demo substitutions, transfers, price source
probes) get a dedicated audit sink so partial outages can be traced.

Usage:
    from maestro_hub.core.logging_config import configure_logging, get_logger

    configure_logging(level="INFO", serialize=False, enable_file=False)
    logger = get_logger(__name__)
    logger.info("provider_call_failed", provider="wio", error="HTTP 503")
"""

import sys
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


# Messages routed to the provider audit log
PROVIDER_EVENTS = (
    "provider_call_failed",
    "demo_data_served",
    "transfer_submitted",
    "transfer_failed",
    "price_source_checked",
)


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    enable_console: bool = True,
    enable_file: bool = True,
    rotation: str = "1 day",
    retention: str = "30 days",
    compression: str = "zip",
    serialize: bool = True
) -> None:
    """
    Configure logging for the entire application.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (default: logs/)
        enable_console: Enable stderr output
        enable_file: Enable file output
        rotation: When to rotate logs (e.g., "1 day", "500 MB")
        retention: How long to keep logs
        compression: Compression format for old logs
        serialize: Use JSON format (recommended for production)
    """
    logger.remove()

    if enable_console:
        if serialize:
            logger.add(
                sys.stderr,
                level=level,
                serialize=True,
                backtrace=True,
                diagnose=False
            )
        else:
            logger.add(
                sys.stderr,
                level=level,
                format=(
                    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                    "<level>{level: <8}</level> | "
                    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                    "<level>{message}</level>"
                ),
                colorize=True
            )

    if enable_file:
        log_dir = log_dir or Path("logs")

        try:
            log_dir.mkdir(exist_ok=True, parents=True)
        except OSError as e:
            logger.error(f"Cannot create log directory {log_dir}: {e}")
            raise OSError(f"Failed to create log directory {log_dir}: {e}") from e

        logger.add(
            log_dir / "maestro_hub_{time}.log",
            level=level,
            rotation=rotation,
            retention=retention,
            compression=compression,
            serialize=serialize,
            backtrace=True,
            diagnose=False
        )

        # Provider audit trail
        logger.add(
            log_dir / "providers_{time}.log",
            level="INFO",
            rotation=rotation,
            retention=retention,
            compression=compression,
            serialize=serialize,
            filter=lambda record: record["message"] in PROVIDER_EVENTS
        )

        logger.add(
            log_dir / "errors_{time}.log",
            level="WARNING",
            rotation=rotation,
            retention=retention,
            compression=compression,
            serialize=serialize
        )


def get_logger(name: str) -> Any:
    """
    Get a logger bound to a module name.

    Args:
        name: Module name (use __name__)

    Returns:
        loguru logger with `module` in its extra context
    """
    return logger.bind(module=name)


class ProviderEventLogger:
    """
    Logger for provider events with standardized fields.

    Every event carries `event` and `provider`/`source` so the audit sink
    can be filtered per institution.
    """

    def __init__(self, component: Optional[str] = None):
        self.logger = logger
        self.component = component

    def _base_context(self) -> Dict[str, Any]:
        context = {}
        if self.component:
            context["component"] = self.component
        return context

    def provider_call_failed(self, provider: str, operation: str, error: str, **kwargs):
        context = self._base_context()
        context.update({
            "event": "provider_call_failed",
            "provider": provider,
            "operation": operation,
            "error": error,
            **kwargs
        })
        self.logger.warning("provider_call_failed", **context)

    def demo_data_served(self, provider: str, operation: str, count: int, **kwargs):
        context = self._base_context()
        context.update({
            "event": "demo_data_served",
            "provider": provider,
            "operation": operation,
            "count": count,
            **kwargs
        })
        self.logger.info("demo_data_served", **context)

    def transfer_submitted(
        self,
        provider: str,
        amount: Decimal,
        currency: str,
        transaction_id: Optional[str] = None,
        status: Optional[str] = None,
        **kwargs
    ):
        context = self._base_context()
        context.update({
            "event": "transfer_submitted",
            "provider": provider,
            "amount": str(amount),
            "currency": currency,
            "transaction_id": transaction_id,
            "status": status,
            **kwargs
        })
        self.logger.info("transfer_submitted", **context)

    def transfer_failed(self, provider: str, amount: Decimal, currency: str, error: str, **kwargs):
        context = self._base_context()
        context.update({
            "event": "transfer_failed",
            "provider": provider,
            "amount": str(amount),
            "currency": currency,
            "error": error,
            **kwargs
        })
        self.logger.warning("transfer_failed", **context)

    def price_source_checked(
        self,
        source: str,
        status: str,
        latency_ms: Optional[float] = None,
        error: Optional[str] = None,
        **kwargs
    ):
        context = self._base_context()
        context.update({
            "event": "price_source_checked",
            "source": source,
            "status": status,
            "latency_ms": round(latency_ms, 2) if latency_ms is not None else None,
            "error": error,
            **kwargs
        })
        self.logger.info("price_source_checked", **context)


# NOTE: Logging is NOT configured on import.
# Entry points call configure_logging() at startup (see maestro_hub.cli).
