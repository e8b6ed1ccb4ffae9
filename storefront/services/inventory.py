"""Per-variant stock kept inside Product.specifications."""
import logging
import re

log = logging.getLogger("storefront")

RECORD_SEP = "|"
FIELD_SEP = ","
_PRICE = re.compile(r"^[\d.]+$")


def _is_stock_record(fields: list[str]) -> bool:
    # CODE,VARIANT,PRICE,PRICE,STOCK[,...]
    return (
        len(fields) >= 5
        and bool(fields[0])
        and _PRICE.match(fields[2]) is not None
        and _PRICE.match(fields[3]) is not None
        and fields[4].isdecimal()
    )


def stock_of(specifications: str, variant: str) -> int | None:
    for record in (specifications or "").split(RECORD_SEP):
        fields = record.split(FIELD_SEP)
        if _is_stock_record(fields) and fields[1] == variant:
            return int(fields[4])
    return None


def decrement_stock(specifications: str, variant: str, quantity: int) -> str:
    """
    Subtract ``quantity`` from every record whose variant is ``variant``.

    Unknown variants and malformed records are left exactly as they were.
    Stock never goes below zero.
    """
    if not specifications:
        return specifications
    records = []
    for record in specifications.split(RECORD_SEP):
        fields = record.split(FIELD_SEP)
        if _is_stock_record(fields) and fields[1] == variant:
            remaining = int(fields[4]) - quantity
            if remaining < 0:
                log.warning(
                    "Stock for variant=%s short by %s, clamping to 0 (had %s)",
                    variant,
                    -remaining,
                    fields[4],
                )
                remaining = 0
            fields[4] = str(remaining)
            record = FIELD_SEP.join(fields)
        records.append(record)
    return RECORD_SEP.join(records)
