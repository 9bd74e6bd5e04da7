"""
Progressive band slicing shared by PAYE and any other banded levy.
"""
from dataclasses import dataclass, asdict, field
from decimal import Decimal
from typing import List, Sequence

from ..core.errors import InvalidInputError
from ..core.utils import Number, round_shillings, to_decimal
from .config import TaxBand

@dataclass(frozen=True)
class BandTax:
    band: str
    taxable_amount: Decimal
    rate: Decimal  # percent, e.g. 25 for 25%
    tax: Decimal   # unrounded

    def to_dict(self):
        return asdict(self)

@dataclass(frozen=True)
class BandSlice:
    total_tax: Decimal
    per_band: List[BandTax] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)

def slice_progressive(bands: Sequence[TaxBand], amount: Number) -> BandSlice:
    """Split ``amount`` across ``bands`` and sum the tax.

    A closed band ``[lower, upper]`` holds ``upper - lower + 1`` shillings, so
    ``[0, 24000]`` holds 24,001 and ``[24001, 32333]`` holds 8,333. The open
    top band absorbs the rest. Band taxes keep their fractions; only the
    total is rounded.
    """
    remaining = to_decimal(amount)
    if remaining < 0:
        raise InvalidInputError(f"Taxable amount must be >= 0, got {remaining}")
    total = Decimal("0")
    per_band: List[BandTax] = []
    for band in bands:
        if remaining <= 0:
            break
        if band.upper is None:
            taxable = remaining
        else:
            taxable = min(remaining, band.upper - band.lower + 1)
        if taxable <= 0:
            continue
        tax = taxable * band.rate
        per_band.append(BandTax(band=band.label, taxable_amount=taxable, rate=band.rate * 100, tax=tax))
        total += tax
        remaining -= taxable
    return BandSlice(total_tax=round_shillings(total), per_band=per_band)
