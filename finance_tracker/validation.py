"""Validation of submitted transaction fields.

Every problem found is collected so the form can show them all at once;
nothing reaches the store unless the whole submission is valid.
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from typing import List, Mapping, Optional

from .errors import ValidationFailed
from .models import CENTS, TransactionInput, TransactionType

MIN_DESCRIPTION_LENGTH = 2
MAX_AMOUNT_INTEGER_DIGITS = 12
MIN_DATE = dt.date(1900, 1, 1)
_AMOUNT_RE = re.compile(r"^(\d*)(\.\d{0,2})?$")


def _optional_text(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def parse_amount(raw: str) -> Decimal:
    """Parse a form amount into a positive two-digit ``Decimal``.

    Accepts ``1234.5`` and ``1234,50``; rejects signs, thousands separators
    and more than two fractional digits.
    """
    value = (raw or "").strip().replace(",", ".")
    match = _AMOUNT_RE.match(value)
    if not value or value == "." or not match:
        raise ValueError("Amount must be a number with at most 2 decimal places.")
    if len(match.group(1).lstrip("0")) > MAX_AMOUNT_INTEGER_DIGITS:
        raise ValueError(f"Amount must have at most {MAX_AMOUNT_INTEGER_DIGITS} digits before the decimal point.")
    try:
        amount = Decimal(value).quantize(CENTS)
    except InvalidOperation as exc:
        raise ValueError("Amount must be a number with at most 2 decimal places.") from exc
    if amount <= 0:
        raise ValueError("Amount must be positive.")
    return amount


def validate_transaction_form(data: Mapping[str, str]) -> TransactionInput:
    errors: List[str] = []

    description = (data.get("description") or "").strip()
    if len(description) < MIN_DESCRIPTION_LENGTH:
        errors.append(f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters.")

    amount: Optional[Decimal] = None
    try:
        amount = parse_amount(data.get("amount") or "")
    except ValueError as exc:
        errors.append(str(exc))

    date_raw = (data.get("date") or "").strip()
    date_value: Optional[str] = None
    if not date_raw:
        errors.append("Date is required.")
    else:
        try:
            parsed = dt.date.fromisoformat(date_raw)
        except ValueError:
            errors.append("Date must be in YYYY-MM-DD format.")
        else:
            if parsed < MIN_DATE:
                errors.append(f"Date must be on or after {MIN_DATE.isoformat()}.")
            else:
                date_value = parsed.isoformat()

    tx_type = (data.get("type") or "").strip()
    if not tx_type:
        errors.append("Type is required.")
    elif tx_type not in TransactionType.values():
        errors.append(f"Unknown transaction type: {tx_type}.")

    if errors:
        raise ValidationFailed(errors)

    return TransactionInput(
        description=description,
        amount=amount,
        date=date_value,
        type=tx_type,
        category=_optional_text(data.get("category")),
        payment_method=_optional_text(data.get("payment_method")),
    )
