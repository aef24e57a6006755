"""Transform Purch gift records into the public GiftItem shape.

ASIN extraction checks, in order:
1. purchLink: .../product/{ASIN}
2. productLink: .../dp/{ASIN}
and falls back to "UNKNOWN".
"""

import re
from typing import Iterable

from xgifts.schemas import GiftItem
from xgifts.services.purch_client import PurchGift

X_PURCH_CHECKOUT = "https://x-purch-741433844771.us-east1.run.app/orders/solana"
UNKNOWN_ASIN = "UNKNOWN"
DEFAULT_REASON = "Based on profile interests"

_PURCH_ASIN_RE = re.compile(r"/product/([A-Z0-9]{10})")
_DP_ASIN_RE = re.compile(r"/dp/([A-Z0-9]{10})")


def extract_asin(purch_link: str | None, product_link: str | None) -> str:
    """Extract ASIN from a Purch link or an Amazon product link."""
    if purch_link:
        m = _PURCH_ASIN_RE.search(purch_link)
        if m:
            return m.group(1)
    if product_link:
        m = _DP_ASIN_RE.search(product_link)
        if m:
            return m.group(1)
    return UNKNOWN_ASIN


def amazon_product_url(asin: str) -> str:
    return f"https://www.amazon.com/dp/{asin}"


def transform_gift(gift: PurchGift, checkout_url: str = X_PURCH_CHECKOUT) -> GiftItem:
    asin = extract_asin(gift.purch_link, gift.product_link)
    return GiftItem(
        title=gift.title,
        price=gift.price,
        image=gift.image,
        reason=gift.reason or DEFAULT_REASON,
        asin=asin,
        product_url=gift.product_link or amazon_product_url(asin),
        checkout_url=checkout_url,
        category=gift.category,
    )


def transform_gifts(gifts: Iterable[PurchGift], checkout_url: str = X_PURCH_CHECKOUT) -> list[GiftItem]:
    """Transform Purch gifts, preserving input order and length."""
    return [transform_gift(gift, checkout_url=checkout_url) for gift in gifts]
