"""
ORACLE - Feed Normalization

Turns raw inbound payloads into prices the monitor can ingest: ticker
messages from the reference exchange feed and answers from the on-chain
price reader.
"""

import json
import math
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from shared import InvalidQuoteError, MalformedTickError

TICKER_TYPE = "ticker"


class TickerMessage(BaseModel):
    """Ticker message from the reference feed."""

    model_config = ConfigDict(extra="ignore")

    type: str
    price: float
    product_id: str | None = None

    @field_validator("price")
    @classmethod
    def _price_is_usable(cls, value: float) -> float:
        if not is_usable_price(value):
            raise ValueError(f"price must be finite and positive, got {value}")
        return value


def is_usable_price(value: float) -> bool:
    """Finite and strictly positive."""
    return math.isfinite(value) and value > 0


def validate_price(value: float) -> float:
    """Check a reference price before it reaches the buffer."""
    try:
        price = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedTickError(f"price is not a number: {value!r}", value) from e

    if not is_usable_price(price):
        raise MalformedTickError(f"price must be finite and positive, got {price}", value)
    return price


def parse_ticker(payload: str | bytes | Mapping) -> TickerMessage | None:
    """
    Parse a raw feed message.

    Returns None for messages that are not tickers (subscription acks,
    heartbeats). Raises MalformedTickError for tickers that cannot be used.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedTickError(f"invalid JSON: {e}", payload) from e

    if not isinstance(payload, Mapping):
        raise MalformedTickError("payload is not an object", payload)

    if payload.get("type") != TICKER_TYPE:
        return None

    try:
        return TickerMessage.model_validate(payload)
    except ValidationError as e:
        fields = ",".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise MalformedTickError(f"invalid ticker fields: {fields}", payload) from e


def validate_quote(value: float) -> float:
    """Check an oracle quote is a usable price."""
    try:
        quote = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidQuoteError(f"quote is not a number: {value!r}") from e

    if not is_usable_price(quote):
        raise InvalidQuoteError(f"quote must be finite and positive, got {quote}")
    return quote


def decode_oracle_answer(answer: int, decimals: int = 8) -> float:
    """Scale a fixed-point on-chain answer to a price."""
    return validate_quote(answer / 10**decimals)
