import hmac
import logging
from dataclasses import asdict
from enum import Enum
from typing import Optional

from flask import jsonify, request
from flask_openapi3 import Info, OpenAPI, Tag
from pydantic import BaseModel, Field

from launchpad_core.collaborators.badges import compute_badges
from launchpad_core.collaborators.graduation import GraduationManager
from launchpad_core.collaborators.registry import PoolRegistry
from launchpad_core.common.enums import OrderSide, WithdrawalAsset
from launchpad_core.common.errors import LaunchpadError, SlippageExceeded, Unauthorized
from launchpad_core.common.model import TokenMetadata, TradeEstimate, TradeResult
from launchpad_core.pool.authority import MintingAuthority
from launchpad_core.pool.config import AdminCap, PlatformConfig, load_platform
from launchpad_core.pool.events import EventBus
from launchpad_core.pool.trading_pool import TradingPool
from launchpad_core.validation.pool_validator import PoolValidator


logger = logging.getLogger(__name__)

info = Info(title="Launchpad Bonding Curve API", version="1.0.0")


class CurveTransactionAction(Enum):
    buy = "buy"
    sell = "sell"


class CreatePoolRequest(BaseModel):
    name: str = Field(description="Display name of the project asset")
    symbol: str = Field(description="Ticker symbol of the project asset")
    decimals: int = Field(6, ge=0, description="Decimal places of the smallest unit")
    description: Optional[str] = Field(None)
    icon_url: Optional[str] = Field(None)
    asset_type: Optional[str] = Field(None, description="Asset type tag; defaults to the symbol")
    creator: str = Field(description="Creator address, receives creator fees")
    creator_fee_bps: int = Field(0, ge=0, description="Creator fee in basis points (max 500)")
    creation_payment: int = Field(0, ge=0, description="Reserve paid for creation; surplus is refunded")


class PoolPath(BaseModel):
    pool_id: str = Field(description="Pool identifier")


class BuyRequest(BaseModel):
    payment: int = Field(ge=0, description="Reserve amount to spend, fees included")
    min_tokens_out: int = Field(0, ge=0, description="Slippage bound on tokens received")
    trader: Optional[str] = Field(None)


class SellRequest(BaseModel):
    tokens_in: int = Field(ge=0, description="Token amount to sell back to the curve")
    min_reserve_out: int = Field(0, ge=0, description="Slippage bound on net reserve received")
    trader: Optional[str] = Field(None)


class EstimateQuery(BaseModel):
    action: CurveTransactionAction = Field(description="Side of the trade to quote")
    amount: int = Field(ge=0, description="Reserve to spend (buy) or tokens to sell (sell)")


class PauseRequest(BaseModel):
    paused: bool = Field(description="New pause state of the pool")


class WithdrawRequest(BaseModel):
    asset: WithdrawalAsset = Field(description="RESERVE or TOKENS")
    amount: int = Field(ge=0, description="Amount to remove from the paused pool")


pool_tag = Tag(name="Pools", description="Create pools and inspect their state")
trade_tag = Tag(name="Bonding Curve Transaction", description="Buy from or sell to a pool's bonding curve")
admin_tag = Tag(name="Admin", description="Pause, emergency withdrawal and graduation; needs the X-Admin-Key header")


def _trade_payload(result: TradeResult):
    return {
        "side": result.side.name,
        "token_amount": result.token_amount,
        "gross_reserve": result.gross_reserve,
        "platform_fee": result.platform_fee,
        "creator_fee": result.creator_fee,
        "net_reserve": result.net_reserve,
        "new_supply": result.new_supply,
        "new_price": result.new_price,
        "average_price": str(result.average_price),
        "timestamp": result.timestamp.isoformat(),
    }


def _estimate_payload(estimate: TradeEstimate):
    return {
        "side": estimate.side.name,
        "token_amount": estimate.token_amount,
        "gross_reserve": estimate.gross_reserve,
        "platform_fee": estimate.platform_fee,
        "creator_fee": estimate.creator_fee,
        "net_reserve": estimate.net_reserve,
        "price_before": estimate.price_before,
        "price_after": estimate.price_after,
        "price_impact_bps": estimate.price_impact_bps,
    }


def _status_code(error: LaunchpadError) -> int:
    if isinstance(error, Unauthorized):
        return 403
    if isinstance(error, SlippageExceeded):
        return 409
    return 400


def create_app(config: Optional[PlatformConfig] = None, cap: Optional[AdminCap] = None,
               admin_key: Optional[str] = None) -> OpenAPI:
    """
    Builds the API around one platform config and an in-memory pool table.
    Without a config a default platform is initialised.

    Admin routes are only registered when both the platform AdminCap and an
    'admin_key' are given; requests must then carry the key in X-Admin-Key.
    """
    if config is None:
        config, cap = load_platform({})

    app = OpenAPI(__name__, info=info)
    bus = EventBus()
    registry = PoolRegistry()
    registry.attach(bus)
    pools = {}

    @app.errorhandler(LaunchpadError)
    def handle_launchpad_error(error: LaunchpadError):
        logger.info("Request rejected: %s: %s", type(error).__name__, error)
        return jsonify({"error": type(error).__name__, "message": str(error)}), _status_code(error)

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        logger.info("Invalid request: %s", error)
        return jsonify({"error": "InvalidRequest", "message": str(error)}), 400

    def _not_found(pool_id: str):
        return jsonify({"error": "PoolNotFound", "message": f"No pool with id {pool_id}"}), 404

    @app.post("/pools", summary="Create Pool", tags=[pool_tag])
    def create_pool(body: CreatePoolRequest):
        """
        Mints a fixed supply for a new asset and opens its bonding curve.
        """
        metadata = TokenMetadata(
            name=body.name,
            symbol=body.symbol,
            decimals=body.decimals,
            description=body.description,
            icon_url=body.icon_url,
        )
        authority = MintingAuthority(body.asset_type or body.symbol.upper())
        pool, receipt = TradingPool.create(
            config,
            authority,
            metadata,
            creator=body.creator,
            creator_fee_bps=body.creator_fee_bps,
            creation_payment=body.creation_payment,
            event_bus=bus,
        )
        pools[pool.id] = pool
        return jsonify({
            "pool": pool.to_dict(),
            "receipt": {
                "minted_supply": receipt.minted_supply,
                "platform_allocation": receipt.platform_allocation,
                "creation_fee": receipt.creation_fee,
                "refund": receipt.refund,
                "treasury": receipt.treasury,
            },
        }), 201

    @app.get("/pools", summary="List Pools", tags=[pool_tag])
    def list_pools():
        """
        Lists every pool known to the registry.
        """
        return jsonify([
            {
                "pool_id": entry.pool_id,
                "name": entry.name,
                "symbol": entry.symbol,
                "graduated": entry.graduated,
            }
            for entry in registry.active() + registry.graduated()
        ])

    @app.get("/pools/<pool_id>", summary="Pool Status", tags=[pool_tag])
    def status(path: PoolPath):
        """
        Returns the pool's balances, price, market cap, flags and badges.
        """
        pool = pools.get(path.pool_id)
        if pool is None:
            return _not_found(path.pool_id)
        payload = pool.to_dict()
        payload["badges"] = [badge.name for badge in compute_badges(pool, config)]
        payload["graduation_ready"] = pool.check_graduation_ready(config)
        return jsonify(payload)

    @app.get("/pools/<pool_id>/validation", summary="Pool Validation", tags=[pool_tag])
    def validation(path: PoolPath):
        """
        Runs config, invariant and scenario validations against the pool.
        """
        pool = pools.get(path.pool_id)
        if pool is None:
            return _not_found(path.pool_id)
        return jsonify(PoolValidator.run_all_validations(pool, config))

    @app.post("/pools/<pool_id>/buy", summary="Buy", tags=[trade_tag])
    def buy(path: PoolPath, body: BuyRequest):
        """
        Spends reserve on the curve and returns the execution information.
        """
        pool = pools.get(path.pool_id)
        if pool is None:
            return _not_found(path.pool_id)
        result = pool.buy(config, body.payment, body.min_tokens_out, trader=body.trader)
        return jsonify(_trade_payload(result))

    @app.post("/pools/<pool_id>/sell", summary="Sell", tags=[trade_tag])
    def sell(path: PoolPath, body: SellRequest):
        """
        Sells tokens back to the curve and returns the execution information.
        """
        pool = pools.get(path.pool_id)
        if pool is None:
            return _not_found(path.pool_id)
        result = pool.sell(config, body.tokens_in, body.min_reserve_out, trader=body.trader)
        return jsonify(_trade_payload(result))

    @app.get("/pools/<pool_id>/estimate", summary="Estimate", tags=[trade_tag])
    def estimate(path: PoolPath, query: EstimateQuery):
        """
        Quotes a buy or sell at the current pool state without executing it.
        """
        pool = pools.get(path.pool_id)
        if pool is None:
            return _not_found(path.pool_id)
        side = OrderSide.from_str(query.action.name)
        if side == OrderSide.BUY:
            quote = pool.estimate_buy(config, query.amount)
        else:
            quote = pool.estimate_sell(config, query.amount)
        return jsonify(_estimate_payload(quote))

    if cap is not None and admin_key:
        _register_admin_routes(app, config, cap, admin_key, pools, bus)

    app.extensions["launchpad"] = {"config": config, "pools": pools, "registry": registry, "bus": bus}
    return app


def _register_admin_routes(app: OpenAPI, config: PlatformConfig, cap: AdminCap, admin_key: str, pools, bus):
    graduation = GraduationManager(config, event_bus=bus)

    def _admin_pool(pool_id: str) -> Optional[TradingPool]:
        supplied = request.headers.get("X-Admin-Key", "")
        if not hmac.compare_digest(supplied.encode(), admin_key.encode()):
            raise Unauthorized("Missing or wrong X-Admin-Key header.")
        return pools.get(pool_id)

    def _not_found(pool_id: str):
        return jsonify({"error": "PoolNotFound", "message": f"No pool with id {pool_id}"}), 404

    @app.post("/pools/<pool_id>/pause", summary="Pause Pool", tags=[admin_tag])
    def pause(path: PoolPath, body: PauseRequest):
        """
        Pauses or resumes trading on the pool.
        """
        pool = _admin_pool(path.pool_id)
        if pool is None:
            return _not_found(path.pool_id)
        pool.set_paused(cap, body.paused)
        return jsonify({"pool_id": pool.id, "paused": pool.paused})

    @app.post("/pools/<pool_id>/withdraw", summary="Emergency Withdrawal", tags=[admin_tag])
    def withdraw(path: PoolPath, body: WithdrawRequest):
        """
        Removes reserve or unsold tokens from a paused pool.
        """
        pool = _admin_pool(path.pool_id)
        if pool is None:
            return _not_found(path.pool_id)
        if body.asset == WithdrawalAsset.RESERVE:
            amount = pool.emergency_withdraw_reserve(cap, body.amount)
        else:
            amount = pool.emergency_withdraw_tokens(cap, body.amount)
        return jsonify({"pool_id": pool.id, "asset": body.asset.name, "amount": amount})

    @app.post("/pools/<pool_id>/graduate", summary="Graduate Pool", tags=[admin_tag])
    def graduate(path: PoolPath):
        """
        Retires a ready pool from the curve and returns its migration ticket.
        """
        pool = _admin_pool(path.pool_id)
        if pool is None:
            return _not_found(path.pool_id)
        ticket = asdict(graduation.graduate(pool, cap))
        ticket["timestamp"] = ticket["timestamp"].isoformat()
        return jsonify(ticket)


if __name__ == "__main__":
    create_app().run(debug=True)
