import logging

from launchpad_core.common.errors import AuthorityRevoked, MathOverflow, ZeroAmount
from launchpad_core.common.math import U64_MAX


logger = logging.getLogger(__name__)


class MintingAuthority:
    """
    The right to mint one project asset. A pool consumes it at creation: the full
    supply is minted once and the authority is revoked, after which no code path
    can create more of the asset.
    """

    def __init__(self, asset_type: str):
        if not asset_type:
            raise ValueError("Asset type tag is required.")
        self._asset_type = asset_type
        self._total_minted = 0
        self._revoked = False

    @property
    def asset_type(self) -> str:
        return self._asset_type

    @property
    def total_minted(self) -> int:
        return self._total_minted

    @property
    def revoked(self) -> bool:
        return self._revoked

    def mint(self, amount: int) -> int:
        if self._revoked:
            raise AuthorityRevoked(f"Minting authority for {self._asset_type} has been revoked.")
        if amount <= 0:
            raise ZeroAmount("Mint amount must be positive.")
        if self._total_minted + amount > U64_MAX:
            raise MathOverflow("Minting would exceed the 64-bit supply limit.")
        self._total_minted += amount
        return amount

    def revoke(self):
        """One-way: once revoked the authority stays revoked."""
        if not self._revoked:
            self._revoked = True
            logger.info("Minting authority for %s revoked after %s units", self._asset_type, self._total_minted)
