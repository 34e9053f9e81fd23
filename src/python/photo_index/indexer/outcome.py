"""
Outcome of one enrichment sub-step (decode, classify, geolocate, ...).

``attempt`` runs a sub-step and turns the expected failure modes into an
Outcome instead of an exception, so callers can tell "skipped" (nothing to
enrich) from "failed" (something broke) without digging through logs.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from photo_index.errors import PhotoIndexError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Status(Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    step: str
    status: Status
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default

    @classmethod
    def success(cls, step: str, value: T) -> "Outcome[T]":
        return cls(step, Status.OK, value)

    @classmethod
    def skipped(cls, step: str, error: BaseException) -> "Outcome[T]":
        return cls(step, Status.SKIPPED, error=error)

    @classmethod
    def failed(cls, step: str, error: BaseException) -> "Outcome[T]":
        return cls(step, Status.FAILED, error=error)


def attempt(step: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    """
    Run fn and wrap its result or its enrichment failure in an Outcome.

    PhotoIndexError subclasses flagged as skippable become SKIPPED and are
    logged at DEBUG; other PhotoIndexErrors and OSErrors become FAILED and
    are logged at ERROR. Anything else propagates.
    """
    try:
        return Outcome.success(step, fn(*args, **kwargs))
    except PhotoIndexError as e:
        if e.skippable:
            logger.debug("%s skipped: %s", step, e)
            return Outcome.skipped(step, e)
        logger.error("%s failed: %s", step, e)
        return Outcome.failed(step, e)
    except OSError as e:
        logger.error("%s failed: %s", step, e)
        return Outcome.failed(step, e)
