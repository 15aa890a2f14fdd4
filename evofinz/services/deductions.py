"""Per-expense deduction split.

Rules:
    - status 'reimbursable' -> nothing deductible, nothing non-deductible
      (the client repays it, so it never reaches the tax totals);
    - any status other than 'deductible' -> whole amount non-deductible;
    - 'deductible' -> amount * category rate, remainder non-deductible.

Categories without a CRA rule are deducted at 100% and logged at WARNING.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from evofinz.services.tax_rules import get_deduction_rule

logger = logging.getLogger("evofinz.tax")

DEFAULT_DEDUCTION_RATE = 1.0


@dataclass(frozen=True)
class DeductionSplit:
    deductible: float
    non_deductible: float
    rate: float


def deduction_rate_for(category: Optional[str]) -> float:
    rule = get_deduction_rule(category)
    if rule is None:
        return DEFAULT_DEDUCTION_RATE
    return rule.deduction_rate


def calculate_deduction(
    amount: float, category: Optional[str], status: Optional[str]
) -> DeductionSplit:
    if status == "reimbursable":
        return DeductionSplit(deductible=0.0, non_deductible=0.0, rate=0.0)
    if status != "deductible":
        return DeductionSplit(deductible=0.0, non_deductible=amount, rate=0.0)

    if get_deduction_rule(category) is None:
        logger.warning(
            "no deduction rule for category; defaulting to full deduction",
            extra={"category": category},
        )
    rate = deduction_rate_for(category)
    deductible = amount * rate
    return DeductionSplit(
        deductible=deductible, non_deductible=amount - deductible, rate=rate
    )


__all__ = [
    "DEFAULT_DEDUCTION_RATE",
    "DeductionSplit",
    "calculate_deduction",
    "deduction_rate_for",
]
