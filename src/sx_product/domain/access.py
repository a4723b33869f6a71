"""Ownership rules for product mutations.

Identity comparison is strict string equality between the acting user id and
the owner recorded on the product. There is no role hierarchy or delegation.
"""

from src.sx_common.errors import ProductForbiddenError, SelfBidError
from src.sx_product.domain.models import Product


def is_owner(product: Product, actor_id: str) -> bool:
    return product.owner == actor_id


def ensure_owner(product: Product, actor_id: str, action: str) -> None:
    """Raise ProductForbiddenError (403) unless actor owns the product.

    action completes the sentence "Only product owner can ...".
    """
    if not is_owner(product, actor_id):
        raise ProductForbiddenError(action)


def ensure_can_bid(product: Product, actor_id: str) -> None:
    """Owners may not bid on their own products (400)."""
    if is_owner(product, actor_id):
        raise SelfBidError()
