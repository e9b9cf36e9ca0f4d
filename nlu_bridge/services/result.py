from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

MISSING = "missing"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of parsing an optional input: a value, or a coded reason there is none.

    ``error_code == "missing"`` means the input was absent; any other code means
    it was present but unusable.
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @staticmethod
    def success(value: T) -> "Result[T]":
        return Result(ok=True, value=value)

    @staticmethod
    def failure(error: str, code: str = "unknown") -> "Result[T]":
        return Result(ok=False, error=error, error_code=code)

    @staticmethod
    def missing(what: str) -> "Result[T]":
        return Result(ok=False, error=f"{what} not provided", error_code=MISSING)

    @property
    def is_missing(self) -> bool:
        return not self.ok and self.error_code == MISSING

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok else default

    def unwrap_or_else(self, factory: Callable[[], T]) -> T:
        """Like unwrap_or, but only builds the default when it is needed."""
        return self.value if self.ok else factory()
