"""Step callables with bound trailing arguments."""

import functools
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"


def step_display_name(func: Callable[..., Any]) -> str:
    """Return the name used for a step in log labels and diagnostics.

    Plain functions and methods use ``__name__``. Partials resolve to the
    wrapped function and callable instances to their class. Lambdas and
    anything without a usable name render as ``"anonymous"``.

    Args:
        func: The step callable.

    Returns:
        Display name for the step.
    """
    while isinstance(func, functools.partial):
        func = func.func

    name = getattr(func, "__name__", None)
    if name is None and callable(func) and not inspect.isroutine(func):
        name = type(func).__name__

    if not isinstance(name, str) or not name or name == "<lambda>":
        return ANONYMOUS
    return name


def takes_value(func: Callable[..., Any]) -> bool:
    """Check whether a step accepts the pipeline value as a positional argument.

    Callables whose signature cannot be read, like some builtins, are
    assumed to take it.
    """
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return True

    positional = {
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.VAR_POSITIONAL,
    }
    return any(param.kind in positional for param in params)


@dataclass(frozen=True)
class Step:
    """A step function plus the arguments supplied at chain-construction time.

    The pipeline value is passed as the leading positional argument,
    followed by ``args`` and ``kwargs``. Steps that declare no positional
    parameters, such as ``def return_five(): ...``, are called without it.
    """

    func: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        """Display name of the wrapped callable."""
        return step_display_name(self.func)

    def _call(self, value: Any) -> Any:  # noqa: ANN401
        if takes_value(self.func):
            return self.func(value, *self.args, **self.kwargs)
        return self.func(*self.args, **self.kwargs)

    def invoke(self, value: Any) -> Any:  # noqa: ANN401
        """Run the step synchronously.

        Raises:
            TypeError: If the step returns an awaitable. Async steps need
                the asynchronous pipeline.
        """
        result = self._call(value)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            msg = (
                f"Step '{self.name}' returned an awaitable. "
                "Use pipe() instead of pipe_sync() for async steps."
            )
            raise TypeError(msg)
        return result

    async def ainvoke(self, value: Any) -> Any:  # noqa: ANN401
        """Run the step, awaiting its result if it is awaitable."""
        result = self._call(value)
        if inspect.isawaitable(result):
            logger.debug("Awaiting step '%s'", self.name)
            result = await result
        return result


__all__ = ["ANONYMOUS", "Step", "step_display_name", "takes_value"]
