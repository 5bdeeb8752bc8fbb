from typing import Any, Awaitable, Callable, Optional
import logging

logger = logging.getLogger(__name__)


async def run_best_effort(description: str, fn: Callable[..., Awaitable[Any]], *args, **kwargs) -> Optional[Any]:
    """
    Await a side effect (push, email, upload cleanup) and swallow its failure.

    The primary mutation has already been persisted when this runs, so a
    failure here is logged and reported as None instead of propagating.
    """
    try:
        return await fn(*args, **kwargs)
    except Exception as e:
        logger.error(f"Best-effort step failed ({description}): {str(e)}")
        return None
