"""
Product name -> category lookup.

Exact, case-sensitive matching against a fixed table. The labels are shown
verbatim in the ledger and in the operator email, so the table is part of the
service's external contract.
"""

from typing import Dict, List

FALLBACK_CATEGORY = "Unknown"

CATEGORY_LABELS: Dict[str, List[str]] = {
    "Ezasekamelweni": [
        "DONSA",
        "MAPHIPHA",
        "MIXER FOR MAN",
        "MV",
        "RS",
        "MD",
        "NHLONIPHO",
        "NHLONIPHO WENKANI",
        "DLISO LANGAPHANSI",
        "SCOBECOBE",
        "DUMBA",
        "FRANK",
        "NSIZI MVUSA",
        "MASHESHISA",
        "MACHAMISA",
        "MAHLANYISA",
        "MSHUBO",
    ],
    "Ezempilo": [
        "ASTHMA & DLISO",
        "MBIZA EMHLOPHE",
        "SKHONDLA KHONDLA",
        "JIKELELE",
        "BP & SUGER",
        "STAPUTAPU",
        "SLODWANA",
        "SHAYIZIFO IMBIZA",
        "NSIZI SHAYIZIFO",
        "NSIZI STROKE",
        "NO 1 MBIZA",
        "MHLABELO",
        "MBIZA EMHLOPHE (ISIWASHO)",
        "GUDUZA",
        "COMBO YAMA PILES",
        "KHIPHA IDLISO POWDER",
    ],
    "Ezokuthandeka": [
        "MOYI MOYI",
        "IBHODLELA",
        "SHUKELA",
        "GANDA GANDA",
        "UHLANGA",
        "KHIYE",
        "SHINGAMU",
        "INYAMAZANE",
        "INTELEZI",
        "NDLEBEZIKHAYA ILANGA",
        "COMBO YAMATHUNZI (UBHAVU)",
        "XABANISA",
        "SKHAFULO",
    ],
}

# Flattened name -> label view, built once at import and never mutated.
PRODUCT_CATEGORIES: Dict[str, str] = {
    product: label
    for label, products in CATEGORY_LABELS.items()
    for product in products
}


def classify(product_name: str) -> str:
    """Return the category label for a product name, or "Unknown"."""
    return PRODUCT_CATEGORIES.get(product_name, FALLBACK_CATEGORY)
