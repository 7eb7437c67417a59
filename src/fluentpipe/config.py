"""Pipeline options and YAML configuration loading."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from fluentpipe.logger import setup_logging

logger = logging.getLogger(__name__)

LOG_DIR = "logs"


class PipeOptions(BaseModel):
    """Options fixed at pipeline creation.

    Accepts both ``use_pipe_error`` and the ``usePipeError`` alias so option
    dictionaries written for other pipe builders keep working.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    use_pipe_error: bool = Field(
        default=False,
        alias="usePipeError",
        description=(
            "Raise a PipeError carrying the failing step name and step history "
            "instead of the original exception"
        ),
    )


def resolve_options(
    options: PipeOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> PipeOptions:
    """Build a PipeOptions from an options object, a mapping, or keywords.

    Args:
        options: Existing options, a mapping of option values, or None.
        **overrides: Option values that take precedence over ``options``.

    Returns:
        Validated, immutable options.

    Raises:
        pydantic.ValidationError: If an option is unknown or has a bad value.
    """
    if isinstance(options, PipeOptions):
        if not overrides:
            return options
        values = options.model_dump()
    elif options is None:
        values = {}
    else:
        values = dict(options)

    values.update(overrides)
    return PipeOptions.model_validate(values)


def load_config(config_path: str | Path) -> dict[str, Any]:
    """Load a pipe configuration from a YAML file.

    Replaces template variables in the format {{ variable_name }} with
    their corresponding top-level string values defined in the config.

    Returns:
        The configuration dictionary. An empty file gives an empty dict.

    Raises:
        ValueError: If the file does not contain a mapping.
    """
    with Path(config_path).open(encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        msg = f"Config file '{config_path}' must contain a mapping, got {type(config).__name__}."
        raise ValueError(msg)

    variables = {key: value for key, value in config.items() if isinstance(value, str)}

    def replace_templates(obj: Any) -> Any:  # noqa: ANN401
        if isinstance(obj, str):
            for var_name, var_value in variables.items():
                obj = obj.replace(f"{{{{ {var_name} }}}}", var_value)
            return obj

        if isinstance(obj, dict):
            return {k: replace_templates(v) for k, v in obj.items()}

        if isinstance(obj, list):
            return [replace_templates(item) for item in obj]

        return obj

    return replace_templates(config)


def configure(config_path: str | Path) -> PipeOptions:
    """Set up logging from a config file and return its pipe options.

    Recognized keys:

    - ``log_file``: log file path. Relative paths are placed in a ``logs``
      directory next to the config file. Omit for console-only logging.
    - ``log_level``: console level name, e.g. ``DEBUG`` to see ``log()``
      lines. Defaults to ``INFO``.
    - ``pipe``: mapping of PipeOptions values.

    Example:
        >>> # pipe.yaml
        >>> # run_name: nightly
        >>> # log_file: "{{ run_name }}.log"
        >>> # log_level: DEBUG
        >>> # pipe:
        >>> #   use_pipe_error: true
        >>> options = configure("pipe.yaml")
        >>> pipe_sync(5, options).next(add, 3).log().result()

    Returns:
        Options from the ``pipe`` section.

    Raises:
        ValueError: If ``log_level`` is not a known level name.
    """
    config = load_config(config_path)

    level_name = str(config.get("log_level", "INFO")).upper()
    console_level = logging.getLevelName(level_name)
    if not isinstance(console_level, int):
        msg = f"Unknown log_level '{level_name}' in {config_path}."
        raise ValueError(msg)

    log_filename = config.get("log_file")
    if log_filename and not Path(log_filename).is_absolute():
        log_dir = Path(config_path).parent / LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        log_filename = log_dir / log_filename

    setup_logging(log_file=log_filename or None, console_level=console_level)
    if log_filename:
        logger.info("Log file: %s", log_filename)
    else:
        logger.info("Console-only logging enabled")

    return resolve_options(config.get("pipe") or {})


__all__ = ["PipeOptions", "configure", "load_config", "resolve_options"]
