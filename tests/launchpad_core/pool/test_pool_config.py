import pytest

from launchpad_core.common.errors import AuthorityRevoked, FeeTooHigh, InvalidConfig, MathOverflow, Unauthorized, ZeroAmount
from launchpad_core.common.math import U64_MAX
from launchpad_core.common.model import CurveParameters
from launchpad_core.pool.authority import MintingAuthority
from launchpad_core.pool.config import (
    DEFAULT_BASE_PRICE,
    DEFAULT_SLOPE,
    AdminCap,
    PlatformConfig,
    init_platform,
    load_platform,
    require_admin,
)


class TestPlatformConfig:
    def test_defaults(self):
        config = PlatformConfig()
        assert config.trading_fee_bps == 100
        assert config.paused is False
        assert config.curve == CurveParameters(DEFAULT_BASE_PRICE, DEFAULT_SLOPE)
        assert config.id

    def test_ids_are_unique(self):
        assert PlatformConfig().id != PlatformConfig().id

    @pytest.mark.parametrize(
        "kwargs, error",
        [
            ({"trading_fee_bps": 501}, FeeTooHigh),
            ({"trading_fee_bps": -1}, FeeTooHigh),
            ({"treasury": ""}, InvalidConfig),
            ({"creation_fee": -5}, InvalidConfig),
            ({"platform_allocation_bps": 10_000}, InvalidConfig),
            ({"token_total_supply": 0}, InvalidConfig),
            ({"token_total_supply": U64_MAX + 1}, InvalidConfig),
            ({"graduation_threshold": -1}, InvalidConfig),
        ]
    )
    def test_invalid_config(self, kwargs, error):
        with pytest.raises(error):
            PlatformConfig(**kwargs)

    def test_invalid_config_is_value_error(self):
        with pytest.raises(ValueError):
            PlatformConfig(trading_fee_bps=10_000)

    def test_from_dict(self):
        config = PlatformConfig.from_dict({
            "treasury": "0xtreasury",
            "trading_fee_bps": 50,
            "creation_fee": 1_000,
            "curve": {"base_price": 1_000, "slope": 1_000_000},
        })
        assert config.treasury == "0xtreasury"
        assert config.trading_fee_bps == 50
        assert config.creation_fee == 1_000
        assert config.curve == CurveParameters(base_price=1_000, slope=1_000_000)

    def test_from_dict_unknown_key(self):
        with pytest.raises(InvalidConfig):
            PlatformConfig.from_dict({"trading_fees_bps": 50})

    def test_from_dict_does_not_mutate_input(self):
        data = {"curve": {"base_price": 2}}
        PlatformConfig.from_dict(data)
        assert data == {"curve": {"base_price": 2}}


class TestAdminCap:
    def test_init_platform_issues_bound_cap(self):
        config, cap = init_platform(trading_fee_bps=25)
        assert isinstance(cap, AdminCap)
        assert cap.config_id == config.id
        assert config.trading_fee_bps == 25
        require_admin(cap, config.id)

    def test_load_platform_from_mapping(self):
        config, cap = load_platform({"trading_fee_bps": 30, "curve": {"slope": 5}})
        assert config.trading_fee_bps == 30
        assert config.curve == CurveParameters(base_price=DEFAULT_BASE_PRICE, slope=5)
        require_admin(cap, config.id)

    def test_load_platform_rejects_unknown_key(self):
        with pytest.raises(InvalidConfig):
            load_platform({"fee": 30})

    def test_cap_cannot_be_forged(self):
        config, _ = init_platform()
        with pytest.raises(TypeError):
            AdminCap(config.id)
        with pytest.raises(TypeError):
            AdminCap(config.id, object())

    def test_cap_is_read_only(self):
        _, cap = init_platform()
        with pytest.raises(AttributeError):
            cap.config_id = "other"
        with pytest.raises(AttributeError):
            cap.extra = 1

    def test_require_admin_rejects_foreign_cap(self):
        config, _ = init_platform()
        _, other_cap = init_platform()
        with pytest.raises(Unauthorized):
            require_admin(other_cap, config.id)
        with pytest.raises(Unauthorized):
            require_admin(None, config.id)

    def test_admin_setters(self):
        config, cap = init_platform()
        config.set_platform_paused(cap, True)
        assert config.paused

        config.update_fees(cap, trading_fee_bps=300, creation_fee=5)
        assert config.trading_fee_bps == 300
        assert config.creation_fee == 5

        config.update_fees(cap, creation_fee=7)
        assert config.trading_fee_bps == 300
        assert config.creation_fee == 7

        config.update_graduation(cap, 10, 20)
        assert config.graduation_threshold == 10
        assert config.min_graduation_liquidity == 20

    def test_admin_setters_validate(self):
        config, cap = init_platform()
        with pytest.raises(FeeTooHigh):
            config.update_fees(cap, trading_fee_bps=501)
        with pytest.raises(InvalidConfig):
            config.update_fees(cap, creation_fee=-1)
        with pytest.raises(InvalidConfig):
            config.update_graduation(cap, -1, 0)
        assert config.trading_fee_bps == 100

    def test_admin_setters_require_cap(self):
        config, _ = init_platform()
        _, other_cap = init_platform()
        with pytest.raises(Unauthorized):
            config.set_platform_paused(other_cap, True)
        with pytest.raises(Unauthorized):
            config.update_fees(other_cap, trading_fee_bps=0)
        assert not config.paused


class TestMintingAuthority:
    def test_mint_then_revoke(self):
        authority = MintingAuthority("FROG")
        assert authority.mint(1_000) == 1_000
        assert authority.total_minted == 1_000
        authority.revoke()
        assert authority.revoked
        with pytest.raises(AuthorityRevoked):
            authority.mint(1)

    def test_revoke_is_idempotent(self):
        authority = MintingAuthority("FROG")
        authority.revoke()
        authority.revoke()
        assert authority.revoked

    def test_mint_validation(self):
        authority = MintingAuthority("FROG")
        with pytest.raises(ZeroAmount):
            authority.mint(0)
        authority.mint(U64_MAX)
        with pytest.raises(MathOverflow):
            authority.mint(1)

    def test_requires_asset_type(self):
        with pytest.raises(ValueError):
            MintingAuthority("")

    def test_flags_are_read_only(self):
        authority = MintingAuthority("FROG")
        with pytest.raises(AttributeError):
            authority.revoked = True
