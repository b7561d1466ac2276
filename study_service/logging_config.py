"""
Logging for the Quizzify service.

Request threads put records on a queue and a single listener thread writes
them to stdout, so lines from concurrent requests never interleave. HTTP
client and LLM SDK loggers are turned down unless debug is on.
"""

import logging
import logging.handlers
import sys
from queue import Queue
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

# Logger name -> level outside debug mode; None disables the logger
QUIET_LOGGERS = {
    "httpx": None,
    "httpcore": None,
    "urllib3": logging.WARNING,
    "openai": logging.WARNING,
    "langchain_core": logging.WARNING,
    "langchain_openai": logging.WARNING,
    "langchain_deepseek": logging.WARNING,
    "langchain_ollama": logging.WARNING,
    "werkzeug": logging.WARNING,
}

_HTTP_TRAFFIC_PREFIXES = ("HTTP Request:", "HTTP Response:")


class _DropHttpTraffic(logging.Filter):
    """Rejects per-call gateway traffic lines, whichever logger emits them."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if record.name.startswith(("httpx", "httpcore")):
            return False
        message = record.getMessage()
        return not (isinstance(message, str) and message.startswith(_HTTP_TRAFFIC_PREFIXES))


class QueueLogging:
    """Owns the root logger's queue handler and the listener draining it."""

    def __init__(self):
        self._listener: Optional[logging.handlers.QueueListener] = None

    def start(self, debug: bool = False) -> None:
        """Install the queue handler on the root logger, replacing any earlier setup."""
        self.stop()

        records: Queue = Queue()
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self._listener = logging.handlers.QueueListener(
            records, stdout_handler, respect_handler_level=True
        )
        self._listener.start()

        queue_handler = logging.handlers.QueueHandler(records)
        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(queue_handler)
        root.setLevel(logging.DEBUG if debug else logging.INFO)

        if not debug:
            queue_handler.addFilter(_DropHttpTraffic())
            for name, level in QUIET_LOGGERS.items():
                client_logger = logging.getLogger(name)
                if level is None:
                    client_logger.disabled = True
                else:
                    client_logger.setLevel(level)

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None


_queue_logging = QueueLogging()


def setup_logging(debug: bool = False) -> None:
    """Configure process-wide logging for the web service."""
    _queue_logging.start(debug)
