"""Tagged outcome of one category fetch.

Core categories turn any failure into ``Fatal``; peripheral categories
turn it into ``Degraded`` carrying an empty value. Cancellation is never
captured here.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from dataverse_blueprint.domain.enums import CategoryPolicy
from dataverse_blueprint.domain.errors import GenerationCancelled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    value: Any


@dataclass(frozen=True)
class Degraded:
    value: Any
    error: Exception


@dataclass(frozen=True)
class Fatal:
    error: Exception


FetchOutcome = Union[Ok, Degraded, Fatal]


async def run_fetch(
    category: str,
    policy: CategoryPolicy,
    fetch: Callable[[], Awaitable[Any]],
    empty: Callable[[], Any] = list,
) -> FetchOutcome:
    """Await ``fetch`` and classify its result under ``policy``."""
    try:
        return Ok(await fetch())
    except GenerationCancelled:
        raise
    except Exception as e:
        if policy is CategoryPolicy.PERIPHERAL:
            logger.warning("%s unavailable, continuing without them: %s", category, e)
            return Degraded(empty(), e)
        logger.error("%s fetch failed: %s", category, e)
        return Fatal(e)


def unwrap(outcome: FetchOutcome) -> Any:
    """Return the carried value, or raise the error of a ``Fatal`` outcome."""
    if isinstance(outcome, Fatal):
        raise outcome.error
    return outcome.value
