"""Non-blocking queue-based logging setup."""

import atexit
import logging
import logging.handlers
import os
import queue
import sys


def setup_logging(
    level: int | str = logging.INFO,
    log_file: str | None = None,
    detach_output: bool = False,
) -> logging.handlers.QueueListener:
    """Configure non-blocking logging using a queue.

    Args:
        level: Root logger level
        log_file: Optional file that receives every record
        detach_output: Redirect stdout/stderr to /dev/null when not attached
            to a terminal (for the server run under a parent process)

    Returns the QueueListener so it can be stopped on shutdown.
    """
    is_interactive = sys.stdout.isatty() and sys.stderr.isatty()
    if detach_output and not is_interactive:
        # Parent processes that don't read our pipes would block writes
        devnull = open(os.devnull, "w")
        sys.stdout = devnull
        sys.stderr = devnull

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)  # Unlimited size
    queue_handler = logging.handlers.QueueHandler(log_queue)

    log_formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    handlers: list[logging.Handler] = []
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(log_formatter)
        handlers.append(file_handler)
    if is_interactive or not detach_output:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(log_formatter)
        handlers.append(stream_handler)

    # QueueListener handles the actual I/O in a separate thread
    queue_listener = logging.handlers.QueueListener(
        log_queue, *handlers, respect_handler_level=True
    )
    queue_listener.start()

    # Register cleanup on exit
    atexit.register(queue_listener.stop)

    # Configure root logger to use queue handler (non-blocking)
    logging.basicConfig(
        level=level,
        handlers=[queue_handler],
        force=True,
    )

    return queue_listener
