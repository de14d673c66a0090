from __future__ import annotations
import importlib
import logging
import os
import signal
from typing import Any

from prometheus_client import start_http_server

from sqs_poller.config import Configuration, _getenv, _getenv_int
from sqs_poller.errors import ConfigurationError
from sqs_poller.logging_setup import PollingLogger, setup_logging
from sqs_poller.poller import SqsPoller

log = logging.getLogger(__name__)


class LogBodyHandler:
    def handle(self, body: str) -> None:
        log.info("message body=%s", body[:2000].replace("\n", " "))


def load_handler(spec: str) -> Any:
    """Import ``module:attr``; a class is instantiated, anything else is used as is."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"SQS_POLLER_HANDLER must look like 'package.module:name', got {spec!r}")
    obj = getattr(importlib.import_module(module_name), attr)
    if isinstance(obj, type):
        return obj()
    return obj


def main() -> None:
    setup_logging(_getenv("LOG_LEVEL", "INFO"))
    polling_logger = PollingLogger(logging.getLogger("sqs_poller"))
    try:
        cfg = Configuration.from_env()
    except ConfigurationError as e:
        polling_logger.fatal("config_error err=%s", e)

    handler_spec = os.getenv("SQS_POLLER_HANDLER")
    handler = load_handler(handler_spec) if handler_spec else LogBodyHandler()

    metrics_bind = _getenv("METRICS_BIND", "127.0.0.1")
    metrics_port = _getenv_int("METRICS_PORT", 9301)

    log.info("startup queue=%s region=%s handler=%s metrics=%s:%s",
             cfg.queue_url, cfg.region, handler_spec or "log", metrics_bind, metrics_port)

    # Metrics endpoint
    if metrics_port > 0:
        start_http_server(metrics_port, addr=metrics_bind)

    poller = SqsPoller(cfg, handler, polling_logger, exit_on_error=True)

    stopping = False

    def _handle_sig(_: int, __: Any) -> None:
        nonlocal stopping
        log.info("signal received, stopping after the current poll")
        stopping = True

    signal.signal(signal.SIGINT, _handle_sig)
    signal.signal(signal.SIGTERM, _handle_sig)

    while not stopping:
        poller.poll()

    log.info("shutdown complete")


if __name__ == "__main__":
    main()
