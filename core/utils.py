# core/utils.py

from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union


def sanitize(data: dict) -> dict:
    """
    Sanitize a payload before it goes to PostgREST:
    - Strip string whitespace
    - Empty strings → None
    - Strip each string inside lists, dropping empty ones
    - datetimes / dates → ISO strings
    Numeric-looking strings stay strings (CNPJ, CPF and phone numbers).
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped or None
        elif isinstance(v, list):
            clean[k] = [
                item.strip() if isinstance(item, str) else item
                for item in v
                if not (isinstance(item, str) and not item.strip())
            ]
        elif isinstance(v, (datetime, date)):
            clean[k] = v.isoformat()
        elif isinstance(v, Decimal):
            clean[k] = float(v)
        else:
            clean[k] = v

    return clean


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    """
    Parse Supabase timestamps ("2025-01-01T00:00:00Z", "...+00:00", "2025-01-01").
    Naive values are treated as UTC.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_money(value) -> float:
    """Round to cents, half-up (never banker's rounding)."""
    if value is None:
        return 0.0
    quantized = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(quantized)


def format_brl(value) -> str:
    """1234.5 → 'R$ 1.234,50'"""
    amount = Decimal(str(value or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    whole, cents = f"{abs(amount):.2f}".split(".")
    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    return f"{sign}R$ {'.'.join(groups)},{cents}"


def format_date_br(value) -> str:
    """ISO timestamp → 'dd/mm/yyyy' (empty string for missing values)."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    return parsed.strftime("%d/%m/%Y")
