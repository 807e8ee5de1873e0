from typing import Any, Dict, List

from launchpad_core.common.errors import LaunchpadError
from launchpad_core.common.math import BPS_DENOMINATOR, bps
from launchpad_core.curves.curve_math import CurveMath
from launchpad_core.pool.config import MAX_TRADING_FEE_BPS, PlatformConfig
from launchpad_core.pool.trading_pool import TradingPool


class PoolValidator:
    """
    Validator for platform configs and live trading pools.
    Performs:
      1) Config checks (fee caps, allocation, curve fits the full supply)
      2) Invariant checks on a pool (supply bounds, reserve coverage, flags)
      3) Scenario tests (buy/sell round trip on a clone of the pool)

    Each step returns a dict with:
      {
        "errors": [str...],
        "warnings": [str...],
        "info": {...}
      }
    and 'run_all_validations' aggregates them into a single result.
    """

    @staticmethod
    def validate_config(config: PlatformConfig) -> Dict[str, Any]:
        """
        Checks that the platform config can actually be traded:
          - trading_fee_bps within the cap
          - allocation leaves something to sell
          - curve_area(total supply) fits the native width
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        if not 0 <= config.trading_fee_bps <= MAX_TRADING_FEE_BPS:
            errors.append(f"Config: 'trading_fee_bps' must be <= {MAX_TRADING_FEE_BPS}.")

        if not 0 <= config.platform_allocation_bps < BPS_DENOMINATOR:
            errors.append("Config: 'platform_allocation_bps' must leave tokens for the curve.")

        sellable = config.token_total_supply - bps(config.token_total_supply, config.platform_allocation_bps)
        base_price, slope = config.curve.base_price, config.curve.slope
        try:
            full_area = CurveMath.curve_area(sellable, base_price, slope)
            info["reserve_to_sell_out"] = full_area
            if full_area < config.min_graduation_liquidity:
                warnings.append(
                    "Config: selling the whole curve never reaches 'min_graduation_liquidity'."
                )
        except LaunchpadError as e:
            errors.append(f"Config: curve area at full supply is not computable: {e}")

        try:
            final_price = CurveMath.price(sellable, base_price, slope)
            info["final_price"] = final_price
        except LaunchpadError as e:
            errors.append(f"Config: price at full supply is not computable: {e}")

        if slope == 0:
            warnings.append("Config: zero slope means a flat price; the curve never appreciates.")

        info["config_summary"] = {
            "trading_fee_bps": config.trading_fee_bps,
            "creation_fee": config.creation_fee,
            "platform_allocation_bps": config.platform_allocation_bps,
            "token_total_supply": config.token_total_supply,
            "base_price": base_price,
            "slope": slope,
        }

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def check_invariants(pool: TradingPool) -> Dict[str, Any]:
        """
        Checks the invariants that must hold whenever the pool is observable.
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        if not 0 <= pool.circulating_supply <= pool.total_supply:
            errors.append(
                f"Circulating supply {pool.circulating_supply} outside [0, {pool.total_supply}]."
            )

        accounted = pool.unsold_balance + pool.circulating_supply + pool.allocations
        if accounted != pool.total_supply:
            errors.append(f"Token conservation broken: {accounted} accounted vs {pool.total_supply} minted.")

        area = CurveMath.curve_area(
            pool.circulating_supply, pool.curve_params.base_price, pool.curve_params.slope
        )
        backing = pool.reserve_balance + pool.extracted_reserve
        if backing < area:
            errors.append(f"Reserve {backing} does not cover curve area {area}.")
        info["reserve_surplus"] = backing - area

        if not pool.minting_authority_revoked:
            errors.append("Minting authority is not revoked.")

        if pool.locked:
            errors.append("Pool is locked outside of a trade.")

        if pool.extracted_reserve and not pool.graduated:
            warnings.append(f"Pool has {pool.extracted_reserve} reserve extracted by emergency withdrawal.")

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def scenario_tests(pool: TradingPool, config: PlatformConfig) -> Dict[str, Any]:
        """
        Runs a buy followed by selling exactly the tokens bought, on a clone of
        'pool' so the real pool is untouched. Flags a round trip that returns more
        than was paid in.
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        if pool.paused or pool.graduated:
            warnings.append("Scenario skipped: pool is not tradable.")
            return {"errors": errors, "warnings": warnings, "info": info}

        sandbox = pool.clone()
        payment = max(config.curve.base_price * 1_000, 1_000)
        try:
            bought = sandbox.buy(config, payment)
            sold = sandbox.sell(config, bought.token_amount)
            info["round_trip"] = {
                "payment": payment,
                "tokens": bought.token_amount,
                "returned": sold.net_reserve,
            }
            if sold.gross_reserve > bought.net_reserve:
                errors.append(
                    f"Round trip returned {sold.gross_reserve} gross for {bought.net_reserve} net paid in."
                )
        except LaunchpadError as e:
            warnings.append(f"Scenario round trip rejected: {type(e).__name__}: {e}")

        inv = PoolValidator.check_invariants(sandbox)
        errors.extend(f"After scenario: {msg}" for msg in inv["errors"])

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def run_all_validations(pool: TradingPool, config: PlatformConfig) -> Dict[str, Any]:
        """
        Aggregates:
          - config check
          - invariant check
          - scenario tests
        Returns a dict with keys: errors, warnings, info
        """
        if not isinstance(pool, TradingPool):
            raise ValueError("Invalid pool type for PoolValidator.")

        results = {
            "errors": [],
            "warnings": [],
            "info": {}
        }

        for check in (
            PoolValidator.validate_config(config),
            PoolValidator.check_invariants(pool),
            PoolValidator.scenario_tests(pool, config),
        ):
            results["errors"].extend(check["errors"])
            results["warnings"].extend(check["warnings"])
            results["info"].update(check["info"])

        return results
