import copy
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from launchpad_core.common.enums import OrderSide, WithdrawalAsset
from launchpad_core.common.errors import (
    AlreadyGraduated,
    AuthorityAlreadyMinted,
    FeeTooHigh,
    InsufficientPayment,
    InsufficientReserve,
    InsufficientTokens,
    InvalidConfig,
    LaunchpadError,
    NotGraduated,
    NotPaused,
    PlatformPaused,
    PoolGraduated,
    PoolPaused,
    ReentrancyDetected,
    SlippageExceeded,
    ZeroAmount,
)
from launchpad_core.common.math import PRECISION, bps, mul_div, to_native
from launchpad_core.common.model import (
    CreationReceipt,
    CurveParameters,
    TokenMetadata,
    TradeEstimate,
    TradeResult,
)
from launchpad_core.curves.curve_math import CurveMath as curve
from launchpad_core.pool.authority import MintingAuthority
from launchpad_core.pool.config import MAX_CREATOR_FEE_BPS, AdminCap, PlatformConfig, require_admin
from launchpad_core.pool.events import (
    EmergencyWithdrawal,
    EventBus,
    PauseChanged,
    PoolCreated,
    Trade,
    default_bus,
)


logger = logging.getLogger(__name__)


class TradingPool:
    """
    Custody and trading state for one issued asset on its bonding curve.

    The pool owns the reserve balance and the unsold project-asset balance. All
    pricing goes through CurveMath; the pool only splits fees, moves balances and
    enforces the safety flags:
      - paused: admin halt, also the first step of any emergency withdrawal
      - graduated: one-way, rejects every trade once set
      - locked: held for the duration of one buy or sell call
      - minting_authority_revoked: set at creation, never cleared

    Every check of a trade runs before its first mutation, so a rejected call
    leaves the pool exactly as it found it.

    Fee timing is asymmetric on purpose: buy fees are taken from the gross payment
    before the curve is evaluated, sell fees from the gross curve output after.
    """

    def __init__(
        self,
        config_id: str,
        asset_type: str,
        metadata: TokenMetadata,
        total_supply: int,
        platform_allocation: int,
        curve_params: CurveParameters,
        creator: str,
        creator_fee_bps: int,
        event_bus: Optional[EventBus] = None,
    ):
        self.id = uuid4().hex
        self.config_id = config_id
        self.asset_type = asset_type
        self.metadata = metadata
        self.curve_params = curve_params
        self.creator = creator
        self.creator_fee_bps = creator_fee_bps
        self.created_at = datetime.now()

        self._total_supply = total_supply
        self.platform_allocation = platform_allocation
        self.reserve_balance = 0
        self.unsold_balance = total_supply - platform_allocation
        self.circulating_supply = 0
        self.extracted_reserve = 0
        self.extracted_tokens = 0

        self.total_volume = 0
        self.trade_count = 0
        self.platform_fees_paid = 0
        self.creator_fees_paid = 0

        self.paused = False
        self._graduated = False
        self._locked = False
        self._minting_authority_revoked = True

        self._mutex = threading.RLock()
        self._event_bus = event_bus or default_bus

    @classmethod
    def create(
        cls,
        config: PlatformConfig,
        minting_authority: MintingAuthority,
        metadata: TokenMetadata,
        creator: str,
        creator_fee_bps: int,
        creation_payment: int,
        event_bus: Optional[EventBus] = None,
    ) -> Tuple["TradingPool", CreationReceipt]:
        """
        Mints the fixed supply once, carves the platform allocation, revokes the
        minting authority and opens a pool with nothing in circulation.

        :return: the new pool and a receipt describing the fee and supply split.
        """
        if config.paused:
            raise PlatformPaused("Platform is paused; pool creation is disabled.")
        if minting_authority.total_minted != 0 or minting_authority.revoked:
            raise AuthorityAlreadyMinted(
                f"Minting authority for {minting_authority.asset_type} has already been used."
            )
        if not 0 <= creator_fee_bps <= MAX_CREATOR_FEE_BPS:
            raise FeeTooHigh(f"Creator fee must be between 0 and {MAX_CREATOR_FEE_BPS} bps.")
        if creation_payment < config.creation_fee:
            raise InsufficientPayment(
                f"Creation requires {config.creation_fee}, received {creation_payment}."
            )
        if not creator:
            raise InvalidConfig("Creator address is required.")

        minted = minting_authority.mint(config.token_total_supply)
        allocation = bps(minted, config.platform_allocation_bps)
        minting_authority.revoke()

        pool = cls(
            config_id=config.id,
            asset_type=minting_authority.asset_type,
            metadata=metadata,
            total_supply=minted,
            platform_allocation=allocation,
            curve_params=config.curve,
            creator=creator,
            creator_fee_bps=creator_fee_bps,
            event_bus=event_bus,
        )
        receipt = CreationReceipt(
            pool_id=pool.id,
            minted_supply=minted,
            platform_allocation=allocation,
            creation_fee=config.creation_fee,
            refund=creation_payment - config.creation_fee,
            treasury=config.treasury,
        )

        pool._event_bus.emit(PoolCreated(
            pool_id=pool.id,
            asset_type=pool.asset_type,
            name=metadata.name,
            symbol=metadata.symbol,
            creator=creator,
            total_supply=minted,
            platform_allocation=allocation,
            creator_fee_bps=creator_fee_bps,
        ))
        return pool, receipt

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def symbol(self) -> str:
        return self.metadata.symbol

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def graduated(self) -> bool:
        return self._graduated

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def minting_authority_revoked(self) -> bool:
        return self._minting_authority_revoked

    @property
    def allocations(self) -> int:
        """Tokens outside both the curve and the unsold balance."""
        return self.platform_allocation + self.extracted_tokens

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    # ------------------------------------------------------------------ guards

    def _rejected(self, error: LaunchpadError) -> LaunchpadError:
        logger.debug("Pool %s rejected operation: %s: %s", self.id, type(error).__name__, error)
        return error

    def _require_config(self, config: PlatformConfig):
        if config.id != self.config_id:
            raise self._rejected(InvalidConfig("Config does not belong to this pool's platform."))

    def _require_tradable(self):
        if self.paused:
            raise self._rejected(PoolPaused(f"Pool {self.symbol} is paused."))
        if self._graduated:
            raise self._rejected(PoolGraduated(f"Pool {self.symbol} has graduated; trading is closed."))

    @contextmanager
    def _reentrancy_guard(self):
        if self._locked:
            raise self._rejected(ReentrancyDetected(f"Pool {self.symbol} is already executing a trade."))
        self._locked = True
        try:
            yield
        finally:
            self._locked = False

    # ---------------------------------------------------------------- pricing

    def price(self) -> int:
        """Current spot price on the curve."""
        return curve.price(self.circulating_supply, self.curve_params.base_price, self.curve_params.slope)

    def market_cap(self) -> int:
        return mul_div(self.price(), self.circulating_supply, PRECISION)

    def _quote_buy(self, config: PlatformConfig, payment: int) -> TradeEstimate:
        base_price, slope = self.curve_params.base_price, self.curve_params.slope
        platform_fee = bps(payment, config.trading_fee_bps)
        creator_fee = bps(payment, self.creator_fee_bps)
        net_reserve_in = payment - platform_fee - creator_fee

        tokens = curve.tokens_out(net_reserve_in, self.circulating_supply, base_price, slope)
        return TradeEstimate(
            side=OrderSide.BUY,
            token_amount=tokens,
            gross_reserve=payment,
            platform_fee=platform_fee,
            creator_fee=creator_fee,
            net_reserve=net_reserve_in,
            price_before=self.price(),
            price_after=curve.price(self.circulating_supply + tokens, base_price, slope),
        )

    def _quote_sell(self, config: PlatformConfig, tokens_in: int) -> TradeEstimate:
        base_price, slope = self.curve_params.base_price, self.curve_params.slope
        gross_reserve_out = curve.reserve_out(tokens_in, self.circulating_supply, base_price, slope)
        platform_fee = bps(gross_reserve_out, config.trading_fee_bps)
        creator_fee = bps(gross_reserve_out, self.creator_fee_bps)

        return TradeEstimate(
            side=OrderSide.SELL,
            token_amount=tokens_in,
            gross_reserve=gross_reserve_out,
            platform_fee=platform_fee,
            creator_fee=creator_fee,
            net_reserve=gross_reserve_out - platform_fee - creator_fee,
            price_before=self.price(),
            price_after=curve.price(self.circulating_supply - tokens_in, base_price, slope),
        )

    def estimate_buy(self, config: PlatformConfig, payment: int) -> TradeEstimate:
        """Quotes a buy of 'payment' reserve units without touching pool state."""
        self._require_config(config)
        if payment <= 0:
            raise self._rejected(ZeroAmount("Payment must be positive."))
        return self._quote_buy(config, payment)

    def estimate_sell(self, config: PlatformConfig, tokens_in: int) -> TradeEstimate:
        """Quotes a sell of 'tokens_in' without touching pool state."""
        self._require_config(config)
        if tokens_in <= 0:
            raise self._rejected(ZeroAmount("Token amount must be positive."))
        if tokens_in > self.circulating_supply:
            raise self._rejected(InsufficientTokens(
                f"Cannot sell {tokens_in}; only {self.circulating_supply} in circulation."
            ))
        return self._quote_sell(config, tokens_in)

    # ----------------------------------------------------------------- trades

    def buy(self, config: PlatformConfig, payment: int, min_tokens_out: int = 0,
            trader: Optional[str] = None) -> TradeResult:
        """
        Spends 'payment' reserve units on the curve.

        Fees come off the gross payment first; the net amount is converted to
        tokens. Rejects with SlippageExceeded when fewer than 'min_tokens_out'
        tokens would be received.
        """
        with self._mutex:
            self._require_config(config)
            self._require_tradable()
            with self._reentrancy_guard():
                if payment <= 0:
                    raise self._rejected(ZeroAmount("Payment must be positive."))

                quote = self._quote_buy(config, payment)
                if quote.token_amount < min_tokens_out:
                    raise self._rejected(SlippageExceeded(
                        f"Buy would return {quote.token_amount} tokens, minimum is {min_tokens_out}."
                    ))
                if quote.token_amount > self.unsold_balance:
                    raise self._rejected(InsufficientTokens(
                        f"Buy needs {quote.token_amount} tokens, only {self.unsold_balance} unsold."
                    ))
                if quote.token_amount == 0:
                    raise self._rejected(ZeroAmount("Payment is too small to buy a single token unit."))
                new_reserve = to_native(self.reserve_balance + quote.net_reserve)

                self.circulating_supply += quote.token_amount
                self.unsold_balance -= quote.token_amount
                self.reserve_balance = new_reserve
                self.total_volume += payment
                self.trade_count += 1
                self.platform_fees_paid += quote.platform_fee
                self.creator_fees_paid += quote.creator_fee

                result = TradeResult(
                    side=OrderSide.BUY,
                    token_amount=quote.token_amount,
                    gross_reserve=payment,
                    platform_fee=quote.platform_fee,
                    creator_fee=quote.creator_fee,
                    net_reserve=quote.net_reserve,
                    new_supply=self.circulating_supply,
                    new_price=quote.price_after,
                )

        self._emit_trade(result, trader)
        return result

    def sell(self, config: PlatformConfig, tokens_in: int, min_reserve_out: int = 0,
             trader: Optional[str] = None) -> TradeResult:
        """
        Returns 'tokens_in' to the curve for reserve.

        Fees come off the gross curve output; the reserve balance is debited by
        the gross amount. Rejects with SlippageExceeded when the net payout is
        below 'min_reserve_out'.
        """
        with self._mutex:
            self._require_config(config)
            self._require_tradable()
            with self._reentrancy_guard():
                if tokens_in <= 0:
                    raise self._rejected(ZeroAmount("Token amount must be positive."))
                if tokens_in > self.circulating_supply:
                    raise self._rejected(InsufficientTokens(
                        f"Cannot sell {tokens_in}; only {self.circulating_supply} in circulation."
                    ))

                quote = self._quote_sell(config, tokens_in)
                if quote.net_reserve < min_reserve_out:
                    raise self._rejected(SlippageExceeded(
                        f"Sell would return {quote.net_reserve}, minimum is {min_reserve_out}."
                    ))
                if quote.gross_reserve > self.reserve_balance:
                    raise self._rejected(InsufficientReserve(
                        f"Sell needs {quote.gross_reserve} reserve, pool holds {self.reserve_balance}."
                    ))
                if quote.gross_reserve == 0:
                    raise self._rejected(ZeroAmount("Sell is too small to return any reserve."))

                self.circulating_supply -= tokens_in
                self.unsold_balance += tokens_in
                self.reserve_balance -= quote.gross_reserve
                self.total_volume += quote.gross_reserve
                self.trade_count += 1
                self.platform_fees_paid += quote.platform_fee
                self.creator_fees_paid += quote.creator_fee

                result = TradeResult(
                    side=OrderSide.SELL,
                    token_amount=tokens_in,
                    gross_reserve=quote.gross_reserve,
                    platform_fee=quote.platform_fee,
                    creator_fee=quote.creator_fee,
                    net_reserve=quote.net_reserve,
                    new_supply=self.circulating_supply,
                    new_price=quote.price_after,
                )

        self._emit_trade(result, trader)
        return result

    def _emit_trade(self, result: TradeResult, trader: Optional[str]):
        self._event_bus.emit(Trade(
            pool_id=self.id,
            side=result.side,
            trader=trader,
            token_amount=result.token_amount,
            reserve_amount=result.gross_reserve,
            platform_fee=result.platform_fee,
            creator_fee=result.creator_fee,
            price_after=result.new_price,
            circulating_after=result.new_supply,
            timestamp=result.timestamp,
        ))

    # ------------------------------------------------------------------ admin

    def set_paused(self, cap: AdminCap, paused: bool):
        require_admin(cap, self.config_id)
        with self._mutex:
            self.paused = paused
        self._event_bus.emit(PauseChanged(pool_id=self.id, paused=paused))

    def emergency_withdraw_reserve(self, cap: AdminCap, amount: int) -> int:
        """Removes 'amount' reserve from a paused pool. Pausing first is mandatory."""
        require_admin(cap, self.config_id)
        with self._mutex:
            if not self.paused:
                raise self._rejected(NotPaused("Pause the pool before withdrawing reserve."))
            if amount <= 0:
                raise self._rejected(ZeroAmount("Withdrawal amount must be positive."))
            if amount > self.reserve_balance:
                raise self._rejected(InsufficientReserve(
                    f"Cannot withdraw {amount}; pool holds {self.reserve_balance}."
                ))
            self.reserve_balance -= amount
            self.extracted_reserve += amount

        logger.warning("Emergency reserve withdrawal of %s from pool %s", amount, self.id)
        self._event_bus.emit(EmergencyWithdrawal(pool_id=self.id, asset=WithdrawalAsset.RESERVE, amount=amount))
        return amount

    def emergency_withdraw_tokens(self, cap: AdminCap, amount: int) -> int:
        """Removes 'amount' unsold tokens from a paused pool."""
        require_admin(cap, self.config_id)
        with self._mutex:
            if not self.paused:
                raise self._rejected(NotPaused("Pause the pool before withdrawing tokens."))
            if amount <= 0:
                raise self._rejected(ZeroAmount("Withdrawal amount must be positive."))
            if amount > self.unsold_balance:
                raise self._rejected(InsufficientTokens(
                    f"Cannot withdraw {amount}; only {self.unsold_balance} unsold."
                ))
            self.unsold_balance -= amount
            self.extracted_tokens += amount

        logger.warning("Emergency token withdrawal of %s from pool %s", amount, self.id)
        self._event_bus.emit(EmergencyWithdrawal(pool_id=self.id, asset=WithdrawalAsset.TOKENS, amount=amount))
        return amount

    # ------------------------------------------------------------- graduation

    def check_graduation_ready(self, config: PlatformConfig) -> bool:
        self._require_config(config)
        return (
            not self._graduated
            and not self.paused
            and self.market_cap() >= config.graduation_threshold
            and self.reserve_balance >= config.min_graduation_liquidity
        )

    def set_graduated(self, cap: AdminCap):
        """One-way transition; there is no way to clear the flag."""
        require_admin(cap, self.config_id)
        with self._mutex:
            if self._graduated:
                raise self._rejected(AlreadyGraduated(f"Pool {self.symbol} has already graduated."))
            self._graduated = True
        logger.info("Pool %s (%s) graduated", self.id, self.symbol)

    def extract_reserve(self, cap: AdminCap) -> int:
        """Drains the entire reserve balance of a graduated pool."""
        require_admin(cap, self.config_id)
        with self._mutex:
            if not self._graduated:
                raise self._rejected(NotGraduated("Reserve can only be extracted after graduation."))
            amount = self.reserve_balance
            self.reserve_balance = 0
            self.extracted_reserve += amount
        return amount

    def extract_unsold(self, cap: AdminCap) -> int:
        """Drains the entire unsold token balance of a graduated pool."""
        require_admin(cap, self.config_id)
        with self._mutex:
            if not self._graduated:
                raise self._rejected(NotGraduated("Tokens can only be extracted after graduation."))
            amount = self.unsold_balance
            self.unsold_balance = 0
            self.extracted_tokens += amount
        return amount

    # ------------------------------------------------------------------ views

    def clone(self) -> "TradingPool":
        """Independent copy of the pool state with its own lock and a private event bus."""
        twin = copy.copy(self)
        twin.metadata = copy.deepcopy(self.metadata)
        twin._mutex = threading.RLock()
        twin._event_bus = EventBus()
        return twin

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "asset_type": self.asset_type,
            "name": self.name,
            "symbol": self.symbol,
            "creator": self.creator,
            "creator_fee_bps": self.creator_fee_bps,
            "total_supply": self.total_supply,
            "circulating_supply": self.circulating_supply,
            "unsold_balance": self.unsold_balance,
            "reserve_balance": self.reserve_balance,
            "platform_allocation": self.platform_allocation,
            "base_price": self.curve_params.base_price,
            "slope": self.curve_params.slope,
            "price": self.price(),
            "market_cap": self.market_cap(),
            "total_volume": self.total_volume,
            "trade_count": self.trade_count,
            "paused": self.paused,
            "graduated": self.graduated,
            "minting_authority_revoked": self.minting_authority_revoked,
            "created_at": self.created_at.isoformat(),
        }
