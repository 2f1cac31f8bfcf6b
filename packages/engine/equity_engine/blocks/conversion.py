"""Conversion preview block.

What-if conversion of outstanding SAFEs and notes at a hypothetical priced
round, without touching the ledger.
"""

from typing import List

import pandas as pd

from .base import Block, BlockContext
from ..calculations.notes import convert_note
from ..calculations.safe import convert_safe
from ..errors import ConfigurationError, ValidationError
from ..schemas import ConversionTerms, SafeInstrument

PREVIEW_COLUMNS = [
    "instrument_id",
    "holder_id",
    "instrument_type",
    "principal",
    "interest",
    "total_amount",
    "conversion_price",
    "shares_issued",
    "used_discount",
    "used_cap",
    "error_code",
]


class ConversionBlock(Block):
    """Converts each instrument at the given round terms.

    Inputs (from context):
        - convertibles: Sequence of SafeInstrument / ConvertibleNote
        - conversion_terms: ConversionTerms of the hypothetical round

    Outputs (to context):
        - conversion_preview: DataFrame with PREVIEW_COLUMNS, one line per
          instrument in id order. Instruments that cannot convert at these
          terms keep their line with empty results and the error code.
    """

    def __init__(self, convertibles_key: str = "convertibles", terms_key: str = "conversion_terms"):
        self.convertibles_key = convertibles_key
        self.terms_key = terms_key

    def inputs(self) -> List[str]:
        return [self.convertibles_key, self.terms_key]

    def outputs(self) -> List[str]:
        return ["conversion_preview"]

    def execute(self, context: BlockContext) -> None:
        instruments = context.get(self.convertibles_key)
        terms: ConversionTerms = context.get(self.terms_key)

        rows = []
        for instrument in sorted(instruments, key=lambda c: c.id):
            row = {
                "instrument_id": instrument.id,
                "holder_id": instrument.holder_id,
                "instrument_type": instrument.type,
                "principal": float(instrument.principal),
                "interest": None,
                "total_amount": None,
                "conversion_price": None,
                "shares_issued": None,
                "used_discount": None,
                "used_cap": None,
                "error_code": None,
            }
            try:
                if isinstance(instrument, SafeInstrument):
                    result = convert_safe(instrument, terms)
                    row["interest"] = 0.0
                    row["total_amount"] = float(instrument.principal)
                else:
                    result = convert_note(instrument, terms)
                    row["interest"] = float(result.interest_amount)
                    row["total_amount"] = float(result.total_amount)
            except (ConfigurationError, ValidationError) as exc:
                row["error_code"] = exc.code
            else:
                row["conversion_price"] = float(result.conversion_price)
                row["shares_issued"] = float(result.shares_issued)
                row["used_discount"] = result.used_discount
                row["used_cap"] = result.used_cap
            rows.append(row)

        context.set("conversion_preview", pd.DataFrame(rows, columns=PREVIEW_COLUMNS))
