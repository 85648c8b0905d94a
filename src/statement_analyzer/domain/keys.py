from __future__ import annotations

import math

KEY_SEPARATOR = "-"


def _js_exponent_form(text: str) -> str:
    """Rewrite Python's ``1.2e-05`` repr the way JavaScript prints numbers.

    JavaScript switches to exponent notation only below 1e-6 or from 1e21 up,
    and writes the exponent without padding (``1e-7``, ``1.5e+21``).
    """
    mantissa, exponent = text.split("e")
    exp = int(exponent)
    sign = "-" if mantissa.startswith("-") else ""
    mantissa = mantissa.lstrip("-")
    if not -7 < exp < 21:
        return f"{sign}{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"

    digits = mantissa.replace(".", "")
    if exp < 0:
        return f"{sign}0.{'0' * (-exp - 1)}{digits}"
    if len(digits) <= exp + 1:
        return f"{sign}{digits}{'0' * (exp + 1 - len(digits))}"
    return f"{sign}{digits[:exp + 1]}.{digits[exp + 1:]}"


def format_amount(amount: float) -> str:
    """Render an amount the way the statement front-end renders numbers.

    Keys stored by the browser were built from JavaScript number strings, so
    integral values drop the ``.0`` and negative zero renders as ``0``.
    """
    amount = float(amount)
    if not math.isfinite(amount) or amount == 0:
        return "0"
    if amount.is_integer() and abs(amount) < 1e21:
        return str(int(amount))
    text = repr(amount)
    if "e" in text:
        return _js_exponent_form(text)
    return text


def transaction_key(operation_date: str, label: str, amount: float, account_number: str) -> str:
    return KEY_SEPARATOR.join(
        (operation_date, label, format_amount(amount), account_number)
    )
