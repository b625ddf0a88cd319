"""
Swipe Round Routes.

One round session per play screen. The client creates a session, picks a
tier, pays the ticket if it has none, then polls the session while swiping.
Timer transitions (countdown -> playing, playing -> summary) are applied
whenever the session is read or acted on.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from api.errors import to_http_exception
from config.constants import RoundConfig
from config.settings import Settings, get_settings
from engines.round_engine import Clock, PoolLoader, RoundEngine
from services.catalog import MockCatalog, get_catalog
from services.checkout import CheckoutService, get_checkout_service
from services.session_manager import RoundSessionManager, get_round_session_manager
from services.settings_store import SettingsStore, get_settings_store
from services.ticket_ledger import TicketLedger, get_ticket_ledger
from shop.errors import CheckoutError, RoundError
from shop.models import (
    Address,
    PaymentForm,
    RoundStage,
    SelectTierRequest,
    StartSessionRequest,
    SwipeRequest,
)


router = APIRouter(prefix="/api/play", tags=["Play"])


# =============================================================================
# Dependencies
# =============================================================================

def get_clock() -> Clock:
    return time.monotonic


def get_pool_loader(catalog: MockCatalog = Depends(get_catalog)) -> PoolLoader:
    return catalog.pool_for


def round_config_from_settings(settings: Settings) -> RoundConfig:
    return RoundConfig(
        COUNTDOWN_SECONDS=settings.countdown_seconds,
        REJECT_COOLDOWN_SECONDS=settings.reject_cooldown_seconds,
        KEEP_COOLDOWN_SECONDS=settings.keep_cooldown_seconds,
        MAX_SECTOR_DRAWS=settings.max_sector_draws,
        MAX_REPLAYS=settings.max_replays,
    )


def get_engine(
    session_id: str,
    sessions: RoundSessionManager = Depends(get_round_session_manager),
) -> RoundEngine:
    engine = sessions.get(session_id)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Round session not found or expired",
        )
    return engine


# =============================================================================
# Session lifecycle
# =============================================================================

@router.post("/sessions", status_code=status.HTTP_201_CREATED, summary="Open a round session")
async def start_session(
    request: StartSessionRequest,
    sessions: RoundSessionManager = Depends(get_round_session_manager),
    store: SettingsStore = Depends(get_settings_store),
    ledger: TicketLedger = Depends(get_ticket_ledger),
    pool_loader: PoolLoader = Depends(get_pool_loader),
    clock: Clock = Depends(get_clock),
) -> Dict[str, Any]:
    """
    Create the state machine for one play screen, starting at ticket selection.
    """
    engine = RoundEngine(
        client_id=request.client_id,
        settings_provider=store.get,
        pool_loader=pool_loader,
        tickets=ledger,
        config=round_config_from_settings(get_settings()),
        clock=clock,
    )
    session_id = sessions.create(engine)
    settings = store.get()

    return {
        "sessionId": session_id,
        "tiers": [tier.model_dump(by_alias=True, exclude_none=True) for tier in settings.tiers],
        "round": engine.snapshot(),
    }


@router.get("/sessions/{session_id}", summary="Round state")
async def read_session(engine: RoundEngine = Depends(get_engine)) -> Dict[str, Any]:
    return engine.snapshot()


@router.delete("/sessions/{session_id}", summary="Close a round session")
async def close_session(
    session_id: str,
    sessions: RoundSessionManager = Depends(get_round_session_manager),
) -> Dict[str, bool]:
    if not sessions.delete(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Round session not found or expired",
        )
    return {"ok": True}


# =============================================================================
# Ticket
# =============================================================================

@router.post("/sessions/{session_id}/tier", summary="Pick a tier")
async def select_tier(
    request: SelectTierRequest,
    engine: RoundEngine = Depends(get_engine),
) -> Dict[str, Any]:
    """
    Goes to countdown with a paid ticket for the tier, to checkout otherwise.
    """
    try:
        engine.select_tier(request.tier_id)
    except RoundError as e:
        raise to_http_exception(e)
    return engine.snapshot()


@router.post("/sessions/{session_id}/checkout", summary="Pay the ticket")
async def pay_ticket(
    form: PaymentForm,
    engine: RoundEngine = Depends(get_engine),
    checkout: CheckoutService = Depends(get_checkout_service),
) -> Dict[str, Any]:
    engine.advance()
    if engine.state.stage != RoundStage.CHECKOUT:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"cannot pay a ticket while in stage '{engine.state.stage.value}'",
        )

    try:
        reference = checkout.pay_ticket(engine.state.tier, form)
        engine.complete_checkout()
    except (CheckoutError, RoundError) as e:
        raise to_http_exception(e)

    return {"paymentRef": reference, "round": engine.snapshot()}


# =============================================================================
# Playing
# =============================================================================

@router.post("/sessions/{session_id}/swipe", summary="Keep or reject the current card")
async def swipe(
    request: SwipeRequest,
    engine: RoundEngine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        outcome = engine.swipe(request.action, product_id=request.product_id)
    except RoundError as e:
        raise to_http_exception(e)

    return {
        "productId": outcome.product.id,
        "requested": outcome.requested.value,
        "applied": outcome.applied.value,
        "forcedReject": outcome.forced_reject,
        "warning": outcome.warning,
        "round": engine.snapshot(),
    }


@router.post("/sessions/{session_id}/finish", summary="End the round now")
async def finish(engine: RoundEngine = Depends(get_engine)) -> Dict[str, Any]:
    try:
        engine.finish()
    except RoundError as e:
        raise to_http_exception(e)
    return engine.snapshot()


# =============================================================================
# Summary
# =============================================================================

@router.post("/sessions/{session_id}/replay", summary="Replay the tier")
async def replay(engine: RoundEngine = Depends(get_engine)) -> Dict[str, Any]:
    try:
        engine.replay()
    except RoundError as e:
        raise to_http_exception(e)
    return engine.snapshot()


@router.post("/sessions/{session_id}/retry", summary="Reload products after a failure")
async def retry(engine: RoundEngine = Depends(get_engine)) -> Dict[str, Any]:
    try:
        engine.retry()
    except RoundError as e:
        raise to_http_exception(e)
    return engine.snapshot()


@router.post("/sessions/{session_id}/address", summary="Capture a shipping address")
async def capture_address(
    address: Address,
    engine: RoundEngine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        engine.capture_address(address)
    except RoundError as e:
        raise to_http_exception(e)
    return engine.snapshot()


@router.post("/sessions/{session_id}/cart-checkout", summary="Check out the kept products")
async def cart_checkout(
    engine: RoundEngine = Depends(get_engine),
    checkout: CheckoutService = Depends(get_checkout_service),
) -> Dict[str, str]:
    engine.advance()
    state = engine.state
    if not state.is_finished:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"cannot check out while in stage '{state.stage.value}'",
        )

    try:
        web_url = checkout.checkout_products(state.kept)
    except CheckoutError as e:
        raise to_http_exception(e)
    return {"webUrl": web_url}
