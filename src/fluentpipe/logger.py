"""Logging configuration and the pipeline value logger."""

import logging
import sys
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

INITIAL_LABEL = "INITIAL"


def default_label(prefix: str, last_step_name: str | None) -> str:
    """Build the default ``log()`` tag, e.g. ``"[PipeSync] add ->"``."""
    return f"[{prefix}] {last_step_name or INITIAL_LABEL} ->"


def log_value(label: str, value: Any) -> None:  # noqa: ANN401
    """Write a pipeline value to the debug channel.

    The record carries ``(label, value)`` as its arguments. A value whose
    repr raises is logged as a placeholder, so this never raises into the
    pipeline.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    try:
        repr(value)
    except Exception:  # noqa: BLE001
        value = f"<unrepresentable {type(value).__name__}>"
    logger.debug("%s %r", label, value)


def setup_logging(
    log_file: Path | str | None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """Configure logging to both console and file.

    Pipeline ``log()`` lines are emitted at DEBUG, so pass
    ``console_level=logging.DEBUG`` to see them on the console.

    Args:
        log_file: Path to the log file, or None for console only
        console_level: Logging level for console output
        file_level: Logging level for file output

    Returns:
        Configured root logger
    """
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Keep foreign handlers (pytest's caplog) and only manage our own
    has_our_console = any(
        getattr(h, "_fluentpipe_console", False) and h.level == console_level
        for h in root_logger.handlers
    )
    if not has_our_console:
        stale = [h for h in root_logger.handlers if getattr(h, "_fluentpipe_console", False)]
        for handler in stale:
            root_logger.removeHandler(handler)

        # Console handler with Unicode error handling for Windows
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(errors="replace")  # pyright: ignore[reportAttributeAccessIssue]
        console_handler = logging.StreamHandler(stream=sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(formatter)
        console_handler._fluentpipe_console = True  # type: ignore[attr-defined]
        root_logger.addHandler(console_handler)

    if log_file is not None:
        resolved_path = str(Path(log_file).resolve())
        file_handlers = [
            h
            for h in root_logger.handlers
            if isinstance(h, logging.FileHandler) and getattr(h, "_fluentpipe_file", False)
        ]
        if not any(h.baseFilename == resolved_path for h in file_handlers):
            # A new log file replaces the previous one
            for handler in file_handlers:
                root_logger.removeHandler(handler)
                handler.close()

            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(file_level)
            file_handler.setFormatter(formatter)
            file_handler._fluentpipe_file = True  # type: ignore[attr-defined]
            root_logger.addHandler(file_handler)

    return root_logger


__all__ = ["INITIAL_LABEL", "default_label", "log_value", "setup_logging"]
