"""Provider health checks — ping each sentiment classifier before a trial."""

import asyncio
import logging

from courtroom.providers.base import SentimentProvider

logger = logging.getLogger(__name__)

_PING_TEXT = "The court is now in session."
_TIMEOUT_SEC = 15.0


async def _check_one(name: str, provider: SentimentProvider) -> tuple[str, bool, str]:
    """Ping a single provider. Returns (name, ok, error_message)."""
    try:
        reading = await asyncio.wait_for(
            provider.analyze(_PING_TEXT, round_number=0),
            timeout=_TIMEOUT_SEC,
        )
    except Exception as exc:
        logger.debug("Health check failed for %s: %s", name, exc)
        return name, False, str(exc) or type(exc).__name__
    if not reading:
        return name, False, "Classifier returned no labels"
    return name, True, ""


async def run_health_checks(
    providers: dict[str, SentimentProvider],
) -> dict[str, tuple[bool, str]]:
    """Ping all providers in parallel.

    Returns:
        Dict mapping provider name -> (ok, error_message).
        error_message is "" when ok is True.
    """
    results = await asyncio.gather(*(_check_one(n, p) for n, p in providers.items()))
    return {name: (ok, err) for name, ok, err in results}
