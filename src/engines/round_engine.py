"""
Round state machine for a single play session.

Stages:
    ticket-selection -> checkout -> countdown -> playing -> summary [-> address]

The engine is event-driven. Every deadline (countdown end, round end,
swipe cooldown) is a timestamp on an injectable monotonic clock, and each
operation first calls advance() to apply any deadline that has passed.
Resetting a round, switching tier or closing the session replaces the
deadlines, so nothing scheduled for an older round can touch a newer one.

Invariants:
- A product is presented at most once per round
- A kept product is in the kept list exactly once
- Remaining seconds never go negative; hitting zero finishes the round once
- With a spend cap, the spend total never exceeds it
"""

import math
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from config.constants import DEFAULT_ROUND_CONFIG, RoundConfig
from core.logging import LoggerMixin
from core.utils import format_amount
from engines.weighted import pick_next_product
from shop.errors import (
    CatalogUnavailable,
    CooldownActive,
    InvalidTransition,
    NoReplaysLeft,
    StaleProduct,
    UnknownTier,
)
from shop.models import (
    Address,
    FinishReason,
    Product,
    RoundStage,
    Sector,
    ShopSettings,
    SwipeAction,
    Tier,
)


PoolLoader = Callable[[List[Sector]], List[Product]]
Clock = Callable[[], float]


@dataclass
class RoundState:
    """Ephemeral per-tab state. Never persisted."""
    stage: RoundStage = RoundStage.TICKET_SELECTION
    tier: Optional[Tier] = None
    sectors: List[Sector] = field(default_factory=list)

    pool: List[Product] = field(default_factory=list)
    shown_ids: Set[str] = field(default_factory=set)
    kept: List[Product] = field(default_factory=list)
    current: Optional[Product] = None

    spend_total: float = 0.0
    spend_cap: Optional[float] = None

    # Deadlines on the engine clock
    countdown_ends_at: Optional[float] = None
    round_ends_at: Optional[float] = None
    cooldown_until: Optional[float] = None
    cooldown_action: Optional[SwipeAction] = None

    finish_reason: Optional[FinishReason] = None
    error: Optional[str] = None
    warning: Optional[str] = None
    replays_left: int = 0
    address: Optional[Address] = None

    @property
    def remaining(self) -> List[Product]:
        return [p for p in self.pool if p.id not in self.shown_ids]

    @property
    def is_finished(self) -> bool:
        return self.stage in (RoundStage.SUMMARY, RoundStage.ADDRESS)


@dataclass
class SwipeOutcome:
    requested: SwipeAction
    applied: SwipeAction
    product: Product
    warning: Optional[str] = None

    @property
    def forced_reject(self) -> bool:
        return self.requested == SwipeAction.KEEP and self.applied == SwipeAction.REJECT


class RoundEngine(LoggerMixin):
    """
    Drives one play session from tier selection to the summary.

    Usage:
        engine = RoundEngine(
            client_id="tab-1",
            settings_provider=store.get,
            pool_loader=catalog.pool_for,
            tickets=ledger,
        )
        engine.select_tier("t30")       # -> checkout (no ticket yet)
        engine.complete_checkout()      # -> countdown
        ...                             # 3 seconds later
        engine.snapshot()               # -> playing, first card drawn
        engine.swipe(SwipeAction.KEEP)
    """

    def __init__(
        self,
        client_id: str,
        settings_provider: Callable[[], ShopSettings],
        pool_loader: PoolLoader,
        tickets,
        config: RoundConfig = DEFAULT_ROUND_CONFIG,
        clock: Clock = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            client_id: Key for the client's paid-ticket record
            settings_provider: Returns the current shop settings
            pool_loader: Loads the products for a tier's sectors; may raise
                CatalogUnavailable
            tickets: Ticket ledger (is_paid / mark_paid / paid_tiers)
            config: Timing and rule knobs
            clock: Monotonic time source in seconds
            rng: Random source for the sector sampler
        """
        self.client_id = client_id
        self._settings_provider = settings_provider
        self._pool_loader = pool_loader
        self._tickets = tickets
        self._config = config
        self._clock = clock
        self._rng = rng or random.Random()

        self.state = RoundState(replays_left=config.MAX_REPLAYS)
        self.finished_rounds = 0

    # =========================================================================
    # Time
    # =========================================================================

    def advance(self) -> RoundState:
        """Apply every deadline that has passed on the engine clock."""
        state = self.state
        now = self._clock()

        if state.stage == RoundStage.COUNTDOWN and now >= state.countdown_ends_at:
            # Round time starts when the lead-in ends, not when we noticed
            self._start_playing(started_at=state.countdown_ends_at)

        if (
            state.stage == RoundStage.PLAYING
            and state.round_ends_at is not None
            and now >= state.round_ends_at
        ):
            self._finish(FinishReason.TIMEOUT)

        return state

    def remaining_seconds(self) -> int:
        state = self.state
        if state.stage == RoundStage.PLAYING and state.round_ends_at is not None:
            return max(0, math.ceil(state.round_ends_at - self._clock()))
        if state.is_finished or state.tier is None:
            return 0
        return state.tier.secs

    def countdown_remaining(self) -> int:
        state = self.state
        if state.stage != RoundStage.COUNTDOWN:
            return 0
        return max(0, math.ceil(state.countdown_ends_at - self._clock()))

    def cooldown_remaining(self) -> float:
        state = self.state
        if state.stage != RoundStage.PLAYING or state.cooldown_until is None:
            return 0.0
        return round(max(0.0, state.cooldown_until - self._clock()), 3)

    # =========================================================================
    # Transitions
    # =========================================================================

    def select_tier(self, tier_id: str) -> RoundStage:
        """
        Pick a tier. Goes to countdown when the client already holds a paid
        ticket for it, otherwise to checkout. Always starts a fresh round.
        """
        self.advance()
        settings = self._settings_provider()
        tier = settings.find_tier(tier_id)
        if tier is None:
            raise UnknownTier(tier_id)

        self._reset_round()
        state = self.state
        state.tier = tier
        state.sectors = settings.sectors_for(tier.id)
        state.spend_cap = tier.spend_cap
        state.replays_left = self._config.MAX_REPLAYS

        if self._tickets.is_paid(self.client_id, tier.id):
            self._start_countdown()
        else:
            state.stage = RoundStage.CHECKOUT

        self.logger.info(
            "Tier selected",
            client_id=self.client_id,
            tier_id=tier.id,
            stage=state.stage.value,
        )
        return state.stage

    def complete_checkout(self) -> RoundStage:
        """Record the ticket as paid after a successful mock payment."""
        self.advance()
        state = self.state
        if state.stage != RoundStage.CHECKOUT:
            raise InvalidTransition("complete checkout", state.stage.value)

        self._tickets.mark_paid(self.client_id, state.tier.id)
        self._start_countdown()
        return state.stage

    def swipe(self, action: SwipeAction, product_id: Optional[str] = None) -> SwipeOutcome:
        """
        Reject or keep the current card and draw the next one.

        Raises:
            InvalidTransition: Not playing
            CooldownActive: Previous action's cooldown has not elapsed
            StaleProduct: product_id is not the current card
        """
        self.advance()
        state = self.state
        if state.stage != RoundStage.PLAYING or state.current is None:
            raise InvalidTransition("swipe", state.stage.value)

        now = self._clock()
        if state.cooldown_until is not None and now < state.cooldown_until:
            raise CooldownActive(state.cooldown_until - now)

        product = state.current
        if product_id is not None and product_id != product.id:
            raise StaleProduct(product_id, product.id)

        state.shown_ids.add(product.id)
        applied = action
        warning = None

        if action == SwipeAction.KEEP:
            new_total = round(state.spend_total + product.amount, 2)
            if state.spend_cap is not None and new_total > state.spend_cap:
                applied = SwipeAction.REJECT
                warning = (
                    f"Budget exceeded: {product.title} costs {format_amount(product.amount)} EUR, "
                    f"{format_amount(max(0.0, state.spend_cap - state.spend_total))} EUR left"
                )
            elif all(kept.id != product.id for kept in state.kept):
                state.kept.append(product)
                state.spend_total = new_total

        state.warning = warning
        if applied == SwipeAction.KEEP:
            cooldown = self._config.KEEP_COOLDOWN_SECONDS
        else:
            cooldown = self._config.REJECT_COOLDOWN_SECONDS
        state.cooldown_until = now + cooldown
        state.cooldown_action = applied

        state.current = self._draw_next()
        if state.current is None:
            self._finish(FinishReason.EXHAUSTED)

        return SwipeOutcome(requested=action, applied=applied, product=product, warning=warning)

    def finish(self) -> None:
        """End the round now and go to the summary."""
        self.advance()
        state = self.state
        if state.stage != RoundStage.PLAYING:
            raise InvalidTransition("finish", state.stage.value)
        self._finish(FinishReason.MANUAL)

    def replay(self) -> None:
        """
        Play the tier again from the summary. Consumes one replay, resets
        shown and kept products, and keeps the paid ticket.
        """
        self.advance()
        state = self.state
        if not state.is_finished or state.tier is None:
            raise InvalidTransition("replay", state.stage.value)
        if state.replays_left <= 0:
            raise NoReplaysLeft("no replays left for this tier")

        state.replays_left -= 1
        self.logger.info("Round replayed", tier_id=state.tier.id, replays_left=state.replays_left)
        self._start_playing(started_at=self._clock())

    def retry(self) -> None:
        """Reload the pool after a load failure. Does not consume a replay."""
        self.advance()
        state = self.state
        if state.stage != RoundStage.SUMMARY or state.finish_reason != FinishReason.ERROR:
            raise InvalidTransition("retry", state.stage.value)
        self._start_playing(started_at=self._clock())

    def capture_address(self, address: Address) -> None:
        self.advance()
        state = self.state
        if state.stage != RoundStage.SUMMARY:
            raise InvalidTransition("capture address", state.stage.value)
        state.address = address
        state.stage = RoundStage.ADDRESS

    def close(self) -> None:
        """Tear down: drop the round and every pending deadline."""
        self._reset_round()
        self.state.tier = None
        self.state.sectors = []
        self.state.stage = RoundStage.TICKET_SELECTION

    # =========================================================================
    # Internals
    # =========================================================================

    def _start_countdown(self) -> None:
        state = self.state
        state.stage = RoundStage.COUNTDOWN
        state.countdown_ends_at = self._clock() + self._config.COUNTDOWN_SECONDS

    def _start_playing(self, started_at: float) -> None:
        state = self.state
        tier = state.tier
        self._clear_round_progress()
        state.stage = RoundStage.PLAYING

        try:
            pool = self._pool_loader(state.sectors)
        except CatalogUnavailable as e:
            self.logger.warning("Product pool load failed", tier_id=tier.id, error=str(e))
            state.error = str(e) or "product pool unavailable"
            self._finish(FinishReason.ERROR)
            return

        allowed = {sector.id for sector in state.sectors}
        state.pool = [p for p in pool if not allowed or p.sector in allowed]
        state.round_ends_at = started_at + tier.secs
        state.current = self._draw_next()

        self.logger.info("Round started", tier_id=tier.id, pool_size=len(state.pool))

        if state.current is None:
            self._finish(FinishReason.EXHAUSTED)

    def _draw_next(self) -> Optional[Product]:
        return pick_next_product(
            self.state.remaining,
            self.state.sectors,
            rng=self._rng,
            max_attempts=self._config.MAX_SECTOR_DRAWS,
        )

    def _finish(self, reason: FinishReason) -> None:
        state = self.state
        if state.is_finished:
            return
        state.stage = RoundStage.SUMMARY
        state.finish_reason = reason
        state.current = None
        state.round_ends_at = None
        state.countdown_ends_at = None
        state.cooldown_until = None
        state.cooldown_action = None
        self.finished_rounds += 1

        self.logger.info(
            "Round finished",
            reason=reason.value,
            kept=len(state.kept),
            shown=len(state.shown_ids),
            spend_total=state.spend_total,
        )

    def _clear_round_progress(self) -> None:
        state = self.state
        state.pool = []
        state.shown_ids = set()
        state.kept = []
        state.current = None
        state.spend_total = 0.0
        state.countdown_ends_at = None
        state.round_ends_at = None
        state.cooldown_until = None
        state.cooldown_action = None
        state.finish_reason = None
        state.error = None
        state.warning = None
        state.address = None

    def _reset_round(self) -> None:
        self._clear_round_progress()
        self.state.stage = RoundStage.TICKET_SELECTION

    # =========================================================================
    # Views
    # =========================================================================

    def snapshot(self) -> Dict[str, Any]:
        """Advance time and return the round as a JSON-ready dict."""
        self.advance()
        state = self.state
        cooldown = self.cooldown_remaining()
        return {
            "stage": state.stage.value,
            "tier": state.tier.model_dump(by_alias=True) if state.tier else None,
            "remainingSeconds": self.remaining_seconds(),
            "countdownRemaining": self.countdown_remaining(),
            "cooldownRemaining": cooldown,
            "cooldownAction": state.cooldown_action.value if cooldown > 0 else None,
            "current": state.current.model_dump(by_alias=True) if state.current else None,
            "kept": [p.model_dump(by_alias=True) for p in state.kept],
            "shownCount": len(state.shown_ids),
            "remainingCount": len(state.remaining) if state.stage == RoundStage.PLAYING else 0,
            "spendTotal": state.spend_total,
            "spendTotalFormatted": format_amount(state.spend_total),
            "spendCap": state.spend_cap,
            "finishReason": state.finish_reason.value if state.finish_reason else None,
            "error": state.error,
            "warning": state.warning,
            "replaysLeft": state.replays_left,
            "roundsFinished": self.finished_rounds,
            "paidTiers": sorted(self._tickets.paid_tiers(self.client_id)),
            "address": state.address.model_dump(by_alias=True) if state.address else None,
        }
