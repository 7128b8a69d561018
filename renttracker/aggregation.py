# aggregation.py
from collections import defaultdict
from decimal import Decimal


def _total_by(records, key):
    totals = defaultdict(lambda: Decimal("0.00"))
    for r in records:
        totals[key(r)] += Decimal(str(r.amount or 0))
    # sorted so the result does not depend on input order
    return {k: totals[k] for k in sorted(totals)}


def monthly_totals(records) -> dict:
    """Sum of amounts per ``month`` label."""
    return _total_by(records, lambda r: r.month)


def tenant_totals(records) -> dict:
    """Sum of amounts per tenant name."""
    return _total_by(records, lambda r: r.tenant_name)


def grand_total(records) -> Decimal:
    return sum((Decimal(str(r.amount or 0)) for r in records), Decimal("0.00"))
