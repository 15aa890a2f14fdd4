"""Static CRA reference tables used by the deduction and export code.

Three tables live here:
    - TAX_DEDUCTION_RULES: category -> deduction rate + CRA description.
    - T2125_LINES: CRA form T2125 Part 5 line -> name, categories, rate.
    - Label tables (bilingual) for categories and statuses.

All of it is read-only reference data; nothing mutates these at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

_CRA_BASE = (
    "https://www.canada.ca/en/revenue-agency/services/tax/businesses/topics/"
    "sole-proprietorships-partnerships/report-business-income-expenses/"
)
T2125_FORM_URL = (
    "https://www.canada.ca/en/revenue-agency/services/forms-publications/forms/t2125.html"
)


@dataclass(frozen=True)
class TaxDeductionRule:
    category: str
    deduction_rate: float
    description: str
    source: str
    source_url: str


TAX_DEDUCTION_RULES: Tuple[TaxDeductionRule, ...] = (
    TaxDeductionRule(
        category="meals",
        deduction_rate=0.5,
        description="Comidas y entretenimiento: 50% deducible",
        source="CRA - Meals and Entertainment",
        source_url=_CRA_BASE
        + "completing-form-t2125/business-expenses/meals-entertainment.html",
    ),
    TaxDeductionRule(
        category="travel",
        deduction_rate=1.0,
        description="Gastos de viaje de negocios: 100% deducible",
        source="CRA - Motor Vehicle and Travel Expenses",
        source_url=_CRA_BASE
        + "completing-form-t2125/business-expenses/motor-vehicle-expenses.html",
    ),
    TaxDeductionRule(
        category="equipment",
        deduction_rate=1.0,
        description="Equipo de oficina: 100% deducible (vía CCA)",
        source="CRA - Capital Cost Allowance",
        source_url=_CRA_BASE + "claiming-capital-cost-allowance.html",
    ),
    TaxDeductionRule(
        category="software",
        deduction_rate=1.0,
        description="Software y suscripciones: 100% deducible",
        source="CRA - Office Expenses",
        source_url=_CRA_BASE
        + "completing-form-t2125/business-expenses/office-expenses.html",
    ),
    TaxDeductionRule(
        category="office_supplies",
        deduction_rate=1.0,
        description="Suministros de oficina: 100% deducible",
        source="CRA - Office Expenses",
        source_url=_CRA_BASE
        + "completing-form-t2125/business-expenses/office-expenses.html",
    ),
    TaxDeductionRule(
        category="utilities",
        deduction_rate=1.0,
        description="Servicios públicos (uso comercial): 100% deducible",
        source="CRA - Office Expenses",
        source_url=_CRA_BASE
        + "completing-form-t2125/business-expenses/office-expenses.html",
    ),
    TaxDeductionRule(
        category="professional_services",
        deduction_rate=1.0,
        description="Servicios profesionales: 100% deducible",
        source="CRA - Professional Fees",
        source_url=_CRA_BASE
        + "completing-form-t2125/business-expenses/legal-accounting-other-professional-fees.html",
    ),
    TaxDeductionRule(
        category="home_office",
        deduction_rate=1.0,
        description="Oficina en casa (porción de uso comercial): deducible según área",
        source="CRA - Business Use of Home",
        source_url=_CRA_BASE
        + "completing-form-t2125/business-expenses/business-use-home-expenses.html",
    ),
    TaxDeductionRule(
        category="mileage",
        deduction_rate=1.0,
        description="Kilometraje: $0.68/km primeros 5,000 km, $0.62/km después (2024)",
        source="CRA - Automobile and Motor Vehicle Allowances",
        source_url=(
            "https://www.canada.ca/en/revenue-agency/services/tax/businesses/topics/"
            "payroll/benefits-allowances/automobile/automobile-motor-vehicle-allowances/"
            "automobile-allowance-rates.html"
        ),
    ),
)

RULES_BY_CATEGORY: Mapping[str, TaxDeductionRule] = MappingProxyType(
    {rule.category: rule for rule in TAX_DEDUCTION_RULES}
)


def get_deduction_rule(category: Optional[str]) -> Optional[TaxDeductionRule]:
    if not category:
        return None
    return RULES_BY_CATEGORY.get(category)


# ---------------- T2125 Part 5 lines -----------------
@dataclass(frozen=True)
class T2125Line:
    line: str
    name: str
    name_es: str
    categories: Tuple[str, ...]
    deduction_rate: float = 1.0
    note: Optional[str] = None
    note_es: Optional[str] = None

    def label(self, language: str) -> str:
        return self.name_es if language == "es" else self.name

    def note_for(self, language: str) -> Optional[str]:
        return self.note_es if language == "es" else self.note


_LINES: Tuple[T2125Line, ...] = (
    T2125Line("8521", "Advertising", "Publicidad", ("advertising", "marketing")),
    T2125Line(
        "8523",
        "Meals and entertainment",
        "Comidas y entretenimiento",
        ("meals", "entertainment"),
        deduction_rate=0.5,
        note="Only 50% deductible per CRA rules",
        note_es="Solo 50% deducible según reglas CRA",
    ),
    T2125Line("8590", "Bad debts", "Deudas incobrables", ("bad_debts",)),
    T2125Line("8690", "Insurance", "Seguros", ("insurance",)),
    T2125Line(
        "8710",
        "Interest and bank charges",
        "Intereses y cargos bancarios",
        ("bank_charges", "interest"),
    ),
    T2125Line(
        "8760",
        "Business taxes, licences, and memberships",
        "Impuestos comerciales, licencias y membresías",
        ("licenses", "memberships", "business_taxes"),
    ),
    T2125Line(
        "8810", "Office expenses", "Gastos de oficina", ("office_supplies", "software")
    ),
    T2125Line(
        "8860",
        "Professional fees (legal, accounting, etc.)",
        "Honorarios profesionales (legal, contabilidad, etc.)",
        ("professional_services",),
    ),
    T2125Line(
        "8871",
        "Management and administration fees",
        "Honorarios de administración",
        ("management_fees",),
    ),
    T2125Line("8910", "Rent", "Alquiler", ("rent",)),
    T2125Line(
        "9060",
        "Salaries, wages, and benefits",
        "Salarios y beneficios",
        ("salaries", "wages"),
    ),
    T2125Line("9180", "Property taxes", "Impuestos de propiedad", ("property_taxes",)),
    T2125Line("9200", "Travel expenses", "Gastos de viaje", ("travel",)),
    T2125Line("9220", "Utilities", "Servicios públicos", ("utilities",)),
    T2125Line(
        "9275",
        "Motor vehicle expenses (not including CCA)",
        "Gastos de vehículo (sin CCA)",
        ("mileage", "vehicle", "gas", "parking"),
    ),
    T2125Line(
        "9281",
        "Capital cost allowance (CCA)",
        "Deducción por costo de capital (CCA)",
        ("equipment",),
        note="Computer equipment typically Class 50 (55%) or Class 10 (30%)",
        note_es="Equipos informáticos típicamente Clase 50 (55%) o Clase 10 (30%)",
    ),
    T2125Line("9270", "Other expenses", "Otros gastos", ("other", "home_office")),
)

T2125_LINES: Mapping[str, T2125Line] = MappingProxyType({ln.line: ln for ln in _LINES})

DEFAULT_T2125_LINE = "9270"

CATEGORY_TO_T2125: Mapping[str, str] = MappingProxyType(
    {
        "meals": "8523",
        "entertainment": "8523",
        "travel": "9200",
        "equipment": "9281",
        "software": "8810",
        "office_supplies": "8810",
        "utilities": "9220",
        "professional_services": "8860",
        "home_office": "9270",
        "mileage": "9275",
        "vehicle": "9275",
        "insurance": "8690",
        "rent": "8910",
        "advertising": "8521",
        "other": "9270",
    }
)


def t2125_line_for(category: Optional[str]) -> str:
    """Return the T2125 line number for a category (9270 when unmapped)."""
    return CATEGORY_TO_T2125.get(category or "other", DEFAULT_T2125_LINE)


# ---------------- Labels -----------------
# Combined bilingual labels used in CSV / JSON / XLSX rows.
EXPORT_CATEGORY_LABELS: Dict[str, str] = {
    "meals": "Comidas / Meals",
    "travel": "Viajes / Travel",
    "equipment": "Equipo / Equipment",
    "software": "Software",
    "office_supplies": "Suministros de Oficina / Office Supplies",
    "utilities": "Servicios Públicos / Utilities",
    "professional_services": "Servicios Profesionales / Professional Services",
    "home_office": "Oficina en Casa / Home Office",
    "mileage": "Kilometraje / Mileage",
    "other": "Otros / Other",
}

EXPORT_STATUS_LABELS: Dict[str, str] = {
    "pending": "Pendiente / Pending",
    "classified": "Clasificado / Classified",
    "deductible": "Deducible / Deductible",
    "non_deductible": "No Deducible / Non-Deductible",
    "reimbursable": "Reembolsable / Reimbursable",
    "rejected": "Rechazado / Rejected",
    "under_review": "En Revisión / Under Review",
    "finalized": "Finalizado / Finalized",
}

CATEGORY_LABELS: Dict[str, Dict[str, str]] = {
    "meals": {"es": "Comidas", "en": "Meals"},
    "travel": {"es": "Viajes", "en": "Travel"},
    "equipment": {"es": "Equipo", "en": "Equipment"},
    "software": {"es": "Software", "en": "Software"},
    "office_supplies": {"es": "Suministros", "en": "Supplies"},
    "utilities": {"es": "Servicios", "en": "Utilities"},
    "professional_services": {"es": "Serv. Profesionales", "en": "Prof. Services"},
    "home_office": {"es": "Oficina Casa", "en": "Home Office"},
    "mileage": {"es": "Kilometraje", "en": "Mileage"},
    "other": {"es": "Otros", "en": "Other"},
    "fuel": {"es": "Combustible", "en": "Fuel"},
    "materials": {"es": "Materiales", "en": "Materials"},
    "tools": {"es": "Herramientas", "en": "Tools"},
    "advertising": {"es": "Publicidad", "en": "Advertising"},
    "insurance": {"es": "Seguros", "en": "Insurance"},
    "communications": {"es": "Comunicaciones", "en": "Communications"},
    "subscriptions": {"es": "Suscripciones", "en": "Subscriptions"},
}

STATUS_LABELS: Dict[str, Dict[str, str]] = {
    "pending": {"es": "Pendiente", "en": "Pending"},
    "classified": {"es": "Clasificado", "en": "Classified"},
    "deductible": {"es": "Deducible", "en": "Deductible"},
    "non_deductible": {"es": "No Deducible", "en": "Non-Deductible"},
    "reimbursable": {"es": "Reembolsable", "en": "Reimbursable"},
    "rejected": {"es": "Rechazado", "en": "Rejected"},
    "under_review": {"es": "En Revisión", "en": "Under Review"},
    "finalized": {"es": "Finalizado", "en": "Finalized"},
}


def export_category_label(category: Optional[str]) -> str:
    return EXPORT_CATEGORY_LABELS.get(category or "other") or category or ""


def export_status_label(status: Optional[str]) -> str:
    return EXPORT_STATUS_LABELS.get(status or "pending") or status or ""


def category_label(category: str, language: str) -> str:
    labels = CATEGORY_LABELS.get(category)
    return labels[language] if labels and language in labels else category


def status_label(status: str, language: str) -> str:
    labels = STATUS_LABELS.get(status)
    return labels[language] if labels and language in labels else status


__all__ = [
    "TaxDeductionRule",
    "TAX_DEDUCTION_RULES",
    "RULES_BY_CATEGORY",
    "get_deduction_rule",
    "T2125Line",
    "T2125_LINES",
    "T2125_FORM_URL",
    "DEFAULT_T2125_LINE",
    "CATEGORY_TO_T2125",
    "t2125_line_for",
    "export_category_label",
    "export_status_label",
    "category_label",
    "status_label",
]
