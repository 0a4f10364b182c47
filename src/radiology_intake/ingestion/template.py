# ============================================================================
# src/radiology_intake/ingestion/template.py
# ============================================================================
"""
Downloadable CSV template for batch uploads.
"""

TEMPLATE_HEADER = ("PatientID", "OrderID", "Report_Text")

TEMPLATE_EXAMPLES = (
    (
        "P-101",
        "ORD-501",
        "CHEST X-RAY PA/LATERAL: Lungs are clear. No pleural effusion. Heart size is normal.",
    ),
    (
        "P-102",
        "ORD-502",
        "CT ABDOMEN: Liver shows a 2 cm hypodense lesion, likely a cyst. "
        "Gallbladder is unremarkable. Impression: Hepatic cyst.",
    ),
)


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def build_template_csv() -> str:
    """Header line plus two example rows, report text always quoted."""
    lines = [",".join(TEMPLATE_HEADER)]
    for key_id, order_id, report in TEMPLATE_EXAMPLES:
        lines.append(f"{key_id},{order_id},{_quote(report)}")
    return "\n".join(lines) + "\n"
