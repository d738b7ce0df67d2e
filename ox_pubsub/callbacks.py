"""Continuations bound to a single outstanding request."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple, Union


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Callbacks:
    """Caller-supplied success and error continuations."""
    on_success: Optional[Callable[..., Any]] = None
    on_error: Optional[Callable[..., Any]] = None

    @classmethod
    def coerce(cls, value: Union["Callbacks", Mapping, None]) -> "Callbacks":
        """Accept a :class:`Callbacks`, a mapping, or ``None``.

        Mappings may use ``on_success``/``on_error`` or the camelCase
        ``onSuccess``/``onError`` keys.
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(
                on_success=value.get("on_success", value.get("onSuccess")),
                on_error=value.get("on_error", value.get("onError")),
            )
        raise TypeError(f"Expected Callbacks or mapping, got {type(value).__name__}")

    @staticmethod
    def looks_like(value: Any) -> bool:
        """Whether *value* exposes success/error continuations."""
        if isinstance(value, Callbacks):
            return True
        if isinstance(value, Mapping):
            return any(
                key in value
                for key in ("on_success", "on_error", "onSuccess", "onError")
            )
        return False


@dataclass(frozen=True)
class Success:
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Failure:
    args: Tuple[Any, ...] = ()


Outcome = Union[Success, Failure]


@dataclass
class Completion:
    """Delivers exactly one outcome to a :class:`Callbacks` pair."""
    callbacks: Callbacks
    operation: str = "request"
    _delivered: bool = field(default=False, init=False, repr=False)

    @property
    def delivered(self) -> bool:
        return self._delivered

    def deliver(self, outcome: Outcome) -> None:
        if self._delivered:
            logger.warning(f"Ignoring second outcome for {self.operation}: {outcome!r}")
            return
        self._delivered = True

        if isinstance(outcome, Success):
            target = self.callbacks.on_success
        elif isinstance(outcome, Failure):
            target = self.callbacks.on_error
        else:
            raise TypeError(f"Unknown outcome {outcome!r}")

        if target is not None:
            target(*outcome.args)

    def succeed(self, *args: Any) -> None:
        self.deliver(Success(args))

    def fail(self, *args: Any) -> None:
        self.deliver(Failure(args))
