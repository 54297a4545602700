"""Factory functions for creating Pantry client instances."""

import httpx

from pantry.adapters.pantry.base import AbstractPantryClient
from pantry.adapters.pantry.http_client import HttpPantryClient
from pantry.adapters.rate_limit.base import AbstractRateLimiter
from pantry.adapters.rate_limit.token_bucket import TokenBucketRateLimiter
from pantry.adapters.transport.base import AbstractDispatcher
from pantry.adapters.transport.dispatcher import HttpDispatcher, RateLimitedDispatcher
from pantry.core.config import settings
from pantry.core.errors import ValidationAppError


def create_dispatcher(
    *,
    rate_limited: bool | None = None,
    limiter: AbstractRateLimiter | None = None,
    http_client: httpx.Client | None = None,
) -> AbstractDispatcher:
    """Build an unthrottled or rate-limited dispatcher from configuration.

    Args:
        rate_limited: Override for PANTRY_RATE_LIMITED.
        limiter: Optional limiter; defaults to a token bucket configured by
            PANTRY_RATE_LIMIT_PER_SECOND / PANTRY_RATE_LIMIT_BURST.
        http_client: Optional pre-built httpx client (not closed by the dispatcher).

    Returns:
        AbstractDispatcher: Configured dispatcher.
    """
    cfg = settings.pantry
    use_limiter = cfg.rate_limited if rate_limited is None else rate_limited

    if not use_limiter:
        return HttpDispatcher(http_client=http_client, timeout_seconds=cfg.timeout_seconds)

    return RateLimitedDispatcher(
        limiter=limiter
        or TokenBucketRateLimiter(
            rate_per_second=cfg.rate_limit_per_second,
            burst=cfg.rate_limit_burst,
        ),
        http_client=http_client,
        timeout_seconds=cfg.timeout_seconds,
    )


def create_pantry_client(
    api_key: str | None = None,
    *,
    rate_limited: bool | None = None,
    strict_decoding: bool | None = None,
    limiter: AbstractRateLimiter | None = None,
    http_client: httpx.Client | None = None,
) -> AbstractPantryClient:
    """Create a Pantry client.

    Explicit arguments win over configuration read from pantry.core.config.settings.

    Returns:
        AbstractPantryClient: Configured client instance.

    Raises:
        ValidationAppError: If no API key is given or configured.
    """
    cfg = settings.pantry
    key = api_key or cfg.api_key
    if not key:
        raise ValidationAppError(
            code="pantry_missing_api_key",
            message="Pantry client requires an API key (argument or PANTRY_API_KEY)",
        )

    dispatcher = create_dispatcher(
        rate_limited=rate_limited,
        limiter=limiter,
        http_client=http_client,
    )
    return HttpPantryClient(
        key,
        dispatcher=dispatcher,
        base_url=cfg.base_url,
        strict_decoding=cfg.strict_decoding if strict_decoding is None else strict_decoding,
    )


def create_rate_limited_pantry_client(
    api_key: str | None = None,
    **kwargs,
) -> AbstractPantryClient:
    """Create a Pantry client whose requests all pass through a token bucket."""
    return create_pantry_client(api_key, rate_limited=True, **kwargs)
