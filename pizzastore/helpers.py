from decimal import Decimal, InvalidOperation

from termcolor import cprint, colored

CENT = Decimal("0.01")
# sql INTEGER columns (ids, quantities) are 32-bit on postgres
MAX_SQL_INT = 2**31 - 1

def safe_int(value: str | None, minimum: int | None = None, maximum: int | None = MAX_SQL_INT):
    """return int value or none if not plain ascii digits or outside minimum..maximum"""
    if value is None:
        return None
    text = value.strip()
    digits = text[1:] if text.startswith("-") else text
    if not (digits.isascii() and digits.isdigit()):
        return None
    v = int(text)
    if minimum is not None and v < minimum:
        return None
    if maximum is not None and v > maximum:
        return None
    return v

def parse_price(value: str | None) -> Decimal | None:
    """return a positive price rounded to cents, or none if invalid"""
    if value is None:
        return None
    try:
        p = Decimal(value.strip().lstrip("$"))
    except InvalidOperation:
        return None
    if not p.is_finite() or p <= 0:
        return None
    return p.quantize(CENT)

def to_decimal(value: str | None) -> Decimal:
    """db text -> decimal (null reads as zero)"""
    return Decimal(value) if value is not None else Decimal("0")

def color_money(amount: Decimal) -> str:
    """format amount as green money string"""
    return colored(f"${amount:.2f}", "green")

def parse_boolean_input(prompt: str, handle_invalid: bool = False) -> bool:
    """parse y/n style input; optionally warn on invalid"""
    p = prompt.lower().strip()
    if p in ("y", "yes"):
        return True
    if p in ("n", "no"):
        return False
    if handle_invalid:
        cprint("invalid input, please try again.", "red")
    return False
