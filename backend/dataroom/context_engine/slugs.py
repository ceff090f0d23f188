"""
Slug normalization and the canonical data room structure.

``slugify`` is the single join key across checklist, coverage, retrieval and
association lookups. Anything that derives a slug from a title must call it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    Normalize a document title into its canonical slug.

    >>> slugify("Director & Officer Insurance")
    'director-and-officer-insurance'
    """
    slug = text.lower().replace("&", " and ")
    slug = _NON_ALNUM.sub("-", slug)
    return slug.strip("-")


@dataclass(frozen=True)
class DataRoomCategory:
    category: str
    documents: Tuple[str, ...]


DATA_ROOM_STRUCTURE: Tuple[DataRoomCategory, ...] = (
    DataRoomCategory("Corporate", (
        "Certificate of Incorporation",
        "Articles of Association",
        "Board Resolutions",
        "Shareholder Agreements",
        "Director & Officer Insurance",
        "Option Pool Setup / ESOP Rules",
        "Board Minutes Archive",
    )),
    DataRoomCategory("Legal", (
        "Terms of Service",
        "Privacy Policy",
        "Data Processing Agreement",
        "Employment Contracts Template",
        "NDAs (employees, contractors, partners)",
        "Litigation/Dispute Summary",
        "Regulatory Licences",
    )),
    DataRoomCategory("Finance", (
        "Audited Financial Statements",
        "Management Accounts",
        "Cash Flow Projections",
        "Tax Returns",
        "Bank Statements",
        "Debt Agreements / Convertible Notes",
        "Cap Table History (share issuances, SAFEs)",
        "Forecast Model (xls/pdf)",
    )),
    DataRoomCategory("Product", (
        "Product Roadmap",
        "Technical Architecture",
        "User Analytics Reports",
        "Security Audit Report",
        "Source Code Escrow Agreements",
        "Penetration Test Reports",
        "SLAs / Uptime Reports",
    )),
    DataRoomCategory("IP", (
        "Trademark Registrations",
        "Patent Applications",
        "IP Assignment Agreements",
        "Open Source Licences",
        "Background vs Foreground IP Register",
    )),
    DataRoomCategory("People", (
        "Employee Handbook",
        "Org Chart",
        "Equity Plan Documents",
        "Key Personnel CVs",
        "Founder/Executive Bios",
        "Employment Policies (leave, benefits)",
    )),
    DataRoomCategory("Operations", (
        "Operational Procedures",
        "Vendor Contracts",
        "Insurance Policies (cyber, liability, D&O)",
        "Compliance Certificates",
        "Risk Register",
        "Internal Controls Overview",
    )),
    DataRoomCategory("Commercial", (
        "Customer Contracts (top 10 material)",
        "Supplier/Vendor Agreements",
        "Partnership/JV Agreements",
        "Sales Pipeline Report",
        "Churn/Retention Data",
    )),
    DataRoomCategory("Strategic", (
        "Pitch Deck",
        "Business Plan / GTM Strategy",
        "Market Research / Competitor Analysis",
        "KPIs / Traction Reports",
        "PR Kit / Press Coverage",
        "Awards & Certifications",
        "ESG / Impact Statements",
    )),
)
