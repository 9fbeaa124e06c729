"""Order Number Rules — pure formatting and parsing for YYYYMMDD-CCC-NNNN numbers.

Invariants:
    - customer_code() is deterministic: same customer id → same 3-char code
    - Canonical numbers always match ORDER_NUMBER_PATTERN
    - Fallback numbers keep the date/code/sequence prefix and append 6 epoch-millis digits
    - All functions are PURE: no IO, no clock reads (callers pass `now`)

Design Decisions:
    - Code derived from the first 8 hex chars of the id: different customers may share
      a code, the unique constraint on order_number still holds because the date and
      sequence are scoped per customer lookup
"""

import re
import string
from datetime import date, datetime, timedelta

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 3
SEQUENCE_WIDTH = 4

ORDER_NUMBER_PATTERN = re.compile(r"^\d{8}-[A-Z0-9]{3}-\d{4}$")
_NON_HEX = re.compile(r"[^0-9a-fA-F]")


def customer_code(customer_id: str) -> str:
    """Map the customer's id onto three [A-Z0-9] characters."""
    hex_digits = _NON_HEX.sub("", customer_id)[:8]
    code = ""
    for i in range(CODE_LENGTH):
        pair = hex_digits[i * 2:i * 2 + 2]
        index = int(pair, 16) % len(CODE_ALPHABET) if pair else 0
        code += CODE_ALPHABET[index]
    return code


def date_stamp(day: date) -> str:
    return day.strftime("%Y%m%d")


def day_window(now: datetime) -> tuple[datetime, datetime]:
    """[start, end] of the calendar day containing `now`, same tzinfo."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1) - timedelta(microseconds=1)
    return start, end


def parse_sequence(order_number: str | None) -> int | None:
    """Sequence segment of an order number, or None if unparseable."""
    if not order_number:
        return None
    parts = order_number.split("-")
    if len(parts) < 3 or not parts[2].isdigit():
        return None
    return int(parts[2])


def next_sequence(last_order_number: str | None) -> int:
    last = parse_sequence(last_order_number)
    return 1 if last is None else last + 1


def format_order_number(day: date, code: str, sequence: int) -> str:
    return f"{date_stamp(day)}-{code}-{sequence:0{SEQUENCE_WIDTH}d}"


def fallback_order_number(day: date, code: str, epoch_millis: int) -> str:
    """Degraded-format number used once every retry has collided."""
    suffix = str(epoch_millis)[-6:]
    return f"{format_order_number(day, code, 1)}-{suffix}"


def is_canonical(order_number: str) -> bool:
    return bool(ORDER_NUMBER_PATTERN.match(order_number))
