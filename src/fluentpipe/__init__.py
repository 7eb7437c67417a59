"""Fluent pipelines that thread a value through sync and async steps."""

from .async_pipeline import PipeAsync, pipe
from .config import PipeOptions, configure, load_config, resolve_options
from .exceptions import PipeError
from .logger import setup_logging
from .pipeline import PipeSync, pipe_sync
from .steps import step_display_name

__all__ = [
    "PipeAsync",
    "PipeError",
    "PipeOptions",
    "PipeSync",
    "configure",
    "load_config",
    "pipe",
    "pipe_sync",
    "resolve_options",
    "setup_logging",
    "step_display_name",
]
