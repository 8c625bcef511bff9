"""
Product family strategies
"""

from typing import Dict

from mintkit.domain.errors import InvalidInputError
from mintkit.domain.families.base import DecodedClaim, ProductFamilyStrategy
from mintkit.domain.families.blind_mint import BlindMintStrategy
from mintkit.domain.families.burn_redeem import BurnRedeemStrategy
from mintkit.domain.families.edition import EditionStrategy
from mintkit.domain.models.product import ProductFamily

_STRATEGIES: Dict[ProductFamily, ProductFamilyStrategy] = {
    ProductFamily.EDITION: EditionStrategy(),
    ProductFamily.BLIND_MINT: BlindMintStrategy(),
    ProductFamily.BURN_REDEEM: BurnRedeemStrategy(),
}


def get_strategy(family: ProductFamily) -> ProductFamilyStrategy:
    try:
        return _STRATEGIES[ProductFamily(family)]
    except (KeyError, ValueError) as exc:
        raise InvalidInputError(
            f"Unsupported product family: {family}", details={"family": str(family)}
        ) from exc


__all__ = [
    "DecodedClaim",
    "ProductFamilyStrategy",
    "EditionStrategy",
    "BlindMintStrategy",
    "BurnRedeemStrategy",
    "get_strategy",
]
