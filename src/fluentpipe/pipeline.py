"""Synchronous fluent pipeline."""

from collections.abc import Callable, Mapping
from typing import Any

from fluentpipe.config import PipeOptions, resolve_options
from fluentpipe.state import PipeState
from fluentpipe.steps import Step

LOG_PREFIX = "PipeSync"


class PipeSync:
    """Chain synchronous steps over a value.

    Each ``next`` call runs immediately. The first failing step freezes the
    pipeline: later ``next`` and ``log`` calls are skipped and the error is
    raised by ``result()``.

    Example:
        >>> pipe_sync(5).next(add, 3).next(multiply, 2).result()
        16
    """

    def __init__(
        self,
        initial_value: Any,  # noqa: ANN401
        options: PipeOptions | None = None,
    ) -> None:
        self._state = PipeState(value=initial_value, options=options or PipeOptions())

    @property
    def options(self) -> PipeOptions:
        """Options fixed at creation."""
        return self._state.options

    @property
    def history(self) -> tuple[str, ...]:
        """Names of the steps that have completed."""
        return self._state.history

    @property
    def failed(self) -> bool:
        """Whether a step has failed."""
        return self._state.failed

    def next(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> "PipeSync":
        """Apply ``func(value, *args, **kwargs)`` and keep its return value.

        Args:
            func: Step function. Receives the current value first unless it
                takes no positional parameters.
            *args: Trailing positional arguments for ``func``.
            **kwargs: Keyword arguments for ``func``.

        Returns:
            This pipeline, for chaining.
        """
        step = Step(func, args, kwargs)
        if self._state.failed:
            self._state = self._state.skip(step)
            return self

        try:
            value = step.invoke(self._state.value)
        except Exception as exc:  # noqa: BLE001
            self._state = self._state.failed_at(step, exc)
        else:
            self._state = self._state.advanced(step, value)
        return self

    def log(self, label: str | None = None) -> "PipeSync":
        """Log the current value at DEBUG without changing it."""
        self._state.log(LOG_PREFIX, label)
        return self

    def result(self) -> Any:  # noqa: ANN401
        """Return the final value.

        Raises:
            Exception: The failing step's exception, or a PipeError wrapping
                it when ``use_pipe_error`` is enabled.
        """
        return self._state.finalize()

    def __repr__(self) -> str:
        status = "failed" if self._state.failed else "ok"
        return f"PipeSync(value={self._state.value!r}, steps={len(self.history)}, {status})"


def pipe_sync(
    initial_value: Any,  # noqa: ANN401
    options: PipeOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> PipeSync:
    """Start a synchronous pipeline.

    Args:
        initial_value: Value passed to the first step.
        options: PipeOptions or a mapping such as ``{"use_pipe_error": True}``.
        **overrides: Option values, e.g. ``use_pipe_error=True``.
    """
    return PipeSync(initial_value, resolve_options(options, **overrides))


__all__ = ["PipeSync", "pipe_sync"]
