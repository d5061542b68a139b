"""Utility functions for the XCM orchestration API."""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

from .constants import MAX_PARACHAIN_ID, MIN_PARACHAIN_ID
from .exceptions import ValidationError

_SI_PREFIXES = ("", "k", "M", "B", "T", "P", "E", "Z", "Y")


def _to_decimal(value: str | int | float | Decimal, field: str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (ValueError, InvalidOperation):
        raise ValidationError(f"Invalid {field}: {value!r}", field=field, value=value)


def to_planck(amount: str | int | float | Decimal, decimals: int = 12) -> int:
    """Convert a human readable amount to the chain's smallest unit."""
    quantity = _to_decimal(amount, "amount")
    if quantity < 0:
        raise ValidationError("Amount cannot be negative", field="amount", value=amount)

    scaled = quantity * Decimal(10**decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_planck(value: str | int, decimals: int = 12) -> Decimal:
    """Convert an amount in the smallest unit back to a Decimal."""
    return _to_decimal(value, "value") / Decimal(10**decimals)


def format_balance(value: str | int, decimals: int = 12, symbol: str = "UNIT") -> str:
    """Format a raw balance with an SI prefix, e.g. ``1.5000 kUNIT``."""
    units = from_planck(value, decimals)

    index = 0
    magnitude = abs(units)
    while magnitude >= 1000 and index < len(_SI_PREFIXES) - 1:
        magnitude /= 1000
        index += 1

    scaled = units / (Decimal(1000) ** index)
    shown = scaled.quantize(Decimal("0.0001"), rounding=ROUND_DOWN)
    return f"{shown} {_SI_PREFIXES[index]}{symbol}"


def is_valid_parachain_id(para_id: object) -> bool:
    """Return True for integer ids inside the public parachain range."""
    return (
        isinstance(para_id, int)
        and not isinstance(para_id, bool)
        and MIN_PARACHAIN_ID <= para_id <= MAX_PARACHAIN_ID
    )


def validate_transfer(
    src_para_id: object,
    dest_para_id: object,
    amount: str | int | None,
    symbol: object,
) -> list[str]:
    """Collect every problem with a transfer request; empty means valid."""
    errors: list[str] = []

    if not is_valid_parachain_id(src_para_id):
        errors.append("Invalid source parachain ID")

    if not is_valid_parachain_id(dest_para_id):
        errors.append("Invalid destination parachain ID")

    if src_para_id == dest_para_id:
        errors.append("Source and destination parachains cannot be the same")

    try:
        valid_amount = amount is not None and int(str(amount)) > 0
    except ValueError:
        valid_amount = False
    if not valid_amount:
        errors.append("Invalid transfer amount")

    if not symbol or not isinstance(symbol, str):
        errors.append("Invalid token symbol")

    return errors


def estimate_xcm_fee(amount: str | int, decimals: int = 12) -> int:
    """Rough fee estimate: 0.01 unit base fee plus 0.1% of the amount."""
    base_fee = to_planck("0.01", decimals)
    return base_fee + int(amount) // 1000


def seed_name(seed: str) -> str:
    """Derive a display name from a dev seed (``//Alice`` -> ``Alice``)."""
    if seed.startswith("//") and len(seed) > 2:
        return seed[2:]
    return "custom"
