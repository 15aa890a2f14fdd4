"""Domain constants and enumerations for validation.

Categories are open-ended: anything outside CATEGORIES is still accepted and
falls back to the "other" bucket wherever a lookup table is involved.
"""

from typing import Set, Tuple

CURRENCIES: Set[str] = {"CAD", "USD", "CLP", "EUR", "MXN"}
DEFAULT_CURRENCY = "CAD"

STATUSES: Tuple[str, ...] = (
    "pending",
    "classified",
    "deductible",
    "non_deductible",
    "reimbursable",
    "rejected",
    "under_review",
    "finalized",
)

CATEGORIES: Set[str] = {
    "meals",
    "entertainment",
    "travel",
    "fuel",
    "equipment",
    "software",
    "mileage",
    "vehicle",
    "home_office",
    "professional_services",
    "office_supplies",
    "utilities",
    "advertising",
    "materials",
    "tools",
    "insurance",
    "communications",
    "subscriptions",
    "rent",
    "other",
}

LANGUAGES: Set[str] = {"es", "en"}
EXPORT_FORMATS: Tuple[str, ...] = ("csv", "json", "xlsx", "pdf")
REPORT_FORMATS: Tuple[str, ...] = ("xlsx", "pdf")
