"""
Bridge connection routes.

The dashboard shows a tri-state indicator from ``GET /health``; the user
re-links a new tunnel URL with ``PUT``. A candidate URL is only stored
after its health probe succeeds.
"""

import logging

from entities.bridge import BridgeClient, BridgeEndpoint, clean_bridge_url, ensure_reachable_scheme
from entities.shared.errors import BridgeConfigurationError
from fastapi import APIRouter, Depends, Header, HTTPException, status
from models import BridgeHealth, BridgeStatus, BridgeUpdateRequest

from api.dependencies import get_bridge_client, get_bridge_endpoint

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bridge", tags=["bridge"])


@router.get("/health", response_model=BridgeHealth)
async def bridge_health(
    client: BridgeClient = Depends(get_bridge_client),
) -> BridgeHealth:
    """Probe the currently configured bridge."""
    return await client.check_health()


@router.put("", response_model=BridgeHealth)
async def update_bridge(
    body: BridgeUpdateRequest,
    origin: str | None = Header(default=None),
    client: BridgeClient = Depends(get_bridge_client),
    endpoint: BridgeEndpoint = Depends(get_bridge_endpoint),
) -> BridgeHealth:
    """Validate a new bridge URL and store it when it answers healthy.

    Unhealthy candidates are reported back without replacing the current
    endpoint.
    """
    try:
        candidate = clean_bridge_url(body.url)
        ensure_reachable_scheme(candidate, origin)
    except BridgeConfigurationError as exc:
        logger.warning("Rejected bridge URL %r: %s", body.url, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.user_message
        ) from exc

    health = await client.check_health(candidate)
    if health.status is BridgeStatus.HEALTHY:
        endpoint.update(candidate)
        endpoint.save()
    else:
        logger.info(
            "Bridge candidate %s is %s; keeping %s", candidate, health.status.value, endpoint.url
        )
    return health
