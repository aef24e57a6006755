"""x402 metering for the paid gift endpoints.

Each metered path gets its own `require_payment` middleware from the x402
package. The middleware answers unpaid requests with 402 and the payment
requirements, verifies X-PAYMENT with the facilitator, and settles after a
successful handler. This module only holds the per-route configuration.
"""

from dataclasses import dataclass
import logging
from typing import Any

from fastapi import FastAPI
from x402.facilitator import FacilitatorConfig
from x402.fastapi.middleware import require_payment
from x402.types import HTTPInputSchema

from xgifts.settings import Settings

logger = logging.getLogger("uvicorn.error")

SUGGEST_DESCRIPTION = (
    "Get personalized gift recommendations based on social media profile analysis. "
    "Analyzes Instagram, X, or TikTok profiles to suggest 3 perfect gifts."
)
TRENDING_DESCRIPTION = "Trending gifts and interests from the last 7 days of gift searches."

_GIFT_ITEM_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "price": {"type": "number"},
        "image": {"type": "string", "format": "uri"},
        "reason": {"type": "string"},
        "asin": {"type": "string", "description": "Amazon ASIN"},
        "productUrl": {"type": "string", "format": "uri", "description": "Amazon product URL"},
        "checkoutUrl": {"type": "string", "format": "uri", "description": "x-purch checkout URL"},
    },
}

SUGGEST_INPUT_SCHEMA = HTTPInputSchema(
    body_type="json",
    body_fields={
        "profileUrl": {
            "type": "string",
            "format": "uri",
            "description": "Social media profile URL (Instagram, X, or TikTok)",
            "required": True,
        },
        "platform": {
            "type": "string",
            "enum": ["instagram", "x", "tiktok"],
            "description": "Social media platform",
            "required": True,
        },
    },
)

SUGGEST_OUTPUT_SCHEMA: dict[str, Any] = {
    "success": {"type": "boolean"},
    "username": {"type": "string"},
    "profilePicUrl": {"type": "string", "format": "uri"},
    "gifts": {"type": "array", "items": _GIFT_ITEM_SCHEMA},
    "interests": {"type": "array", "items": {"type": "string"}},
    "themes": {"type": "array", "items": {"type": "string"}},
    "cached": {"type": "boolean"},
}

TRENDING_OUTPUT_SCHEMA: dict[str, Any] = {
    "success": {"type": "boolean"},
    "trending": {
        "type": "object",
        "properties": {
            "gifts": {"type": "array", "items": _GIFT_ITEM_SCHEMA},
            "interests": {"type": "array", "items": {"type": "string"}},
            "period": {"type": "string"},
            "sampleSize": {"type": "integer"},
        },
    },
    "cached": {"type": "boolean"},
}


@dataclass
class MeteredRoute:
    """Price and discovery metadata for one paid path."""

    path: str
    price: str
    description: str
    resource: str
    input_schema: HTTPInputSchema | None = None
    output_schema: dict[str, Any] | None = None


def metered_routes(settings: Settings) -> list[MeteredRoute]:
    """Paid routes of the gifts API."""
    base = settings.public_base_url.rstrip("/")
    return [
        MeteredRoute(
            path="/gifts/suggest",
            price=settings.x402_suggest_price,
            description=SUGGEST_DESCRIPTION,
            resource=f"{base}/gifts/suggest",
            input_schema=SUGGEST_INPUT_SCHEMA,
            output_schema=SUGGEST_OUTPUT_SCHEMA,
        ),
        MeteredRoute(
            path="/gifts/trending",
            price=settings.x402_trending_price,
            description=TRENDING_DESCRIPTION,
            resource=f"{base}/gifts/trending",
            output_schema=TRENDING_OUTPUT_SCHEMA,
        ),
    ]


def install_payment_middleware(app: FastAPI, settings: Settings) -> None:
    """Register one x402 middleware per metered route."""
    if not settings.x402_pay_to_address:
        raise RuntimeError("X402_ENABLED requires X402_PAY_TO_ADDRESS")

    facilitator = FacilitatorConfig(url=settings.x402_facilitator_url)
    for route in metered_routes(settings):
        app.middleware("http")(
            require_payment(
                path=route.path,
                price=route.price,
                pay_to_address=settings.x402_pay_to_address,
                network=settings.x402_network,
                description=route.description,
                mime_type="application/json",
                max_deadline_seconds=settings.x402_max_timeout_seconds,
                input_schema=route.input_schema,
                output_schema=route.output_schema,
                resource=route.resource,
                facilitator_config=facilitator,
            )
        )
        logger.info(f"x402 metering {route.path} at {route.price} on {settings.x402_network}")
