"""
Rubric Catalog - Perspective-specific review criteria

Each perspective (founder, investor diligence, acquirer M&A) carries its own
required document tree, metric requirements, expected output sections and
advisor operating principles. The catalog is immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Tuple

from .slugs import slugify


class Perspective(str, Enum):
    """Analytical viewpoint selecting rubric and advice framing"""
    FOUNDER = "founder"
    INVESTOR_DILIGENCE = "investor_diligence"
    ACQUIRER_MNA = "acquirer_mna"


@dataclass(frozen=True)
class RubricCategory:
    name: str
    documents: Tuple[str, ...]


@dataclass(frozen=True)
class MetricSpec:
    key: str
    label: str
    description: str
    formula: Optional[str] = None
    unit: Optional[str] = None
    required: bool = False


@dataclass(frozen=True)
class Rubric:
    perspective: Perspective
    required_documents: Tuple[RubricCategory, ...]
    required_metrics: Tuple[MetricSpec, ...]
    sections: Tuple[str, ...]
    principles: Tuple[str, ...]

    def required_doc_slugs(self, normalize: Callable[[str], str] = slugify) -> List[str]:
        """Flatten required document titles into de-duplicated slugs, tree order."""
        seen = set()
        slugs: List[str] = []
        for category in self.required_documents:
            for document in category.documents:
                slug = normalize(document)
                if slug not in seen:
                    seen.add(slug)
                    slugs.append(slug)
        return slugs


CORE_METRICS: Tuple[MetricSpec, ...] = (
    MetricSpec("mrr", "MRR/ARR", "Monthly/annual recurring revenue.", unit="$", required=True),
    MetricSpec("growth_rate", "Growth Rate", "MoM/YoY revenue growth.",
               formula="(Revenue_t - Revenue_(t-1)) / Revenue_(t-1)", unit="%", required=True),
    MetricSpec("gross_margin", "Gross Margin", "(Revenue - COGS) / Revenue.", unit="%", required=True),
    MetricSpec("burn", "Net Burn", "Monthly net cash outflow.", unit="$", required=True),
    MetricSpec("runway", "Runway", "Months of cash left at current burn.",
               formula="Cash / Burn", unit="months", required=True),
    MetricSpec("ltv", "LTV", "Lifetime value per customer.", unit="$"),
    MetricSpec("cac", "CAC", "Customer acquisition cost.", unit="$"),
    MetricSpec("ltv_cac", "LTV/CAC", "Efficiency ratio.", formula="LTV / CAC"),
    MetricSpec("payback", "Payback Period", "Months to recover CAC.", unit="months"),
    MetricSpec("gdr", "Gross Dollar Retention", "Revenue retained before expansion.", unit="%", required=True),
    MetricSpec("ndr", "Net Dollar Retention", "Revenue retained including expansion.", unit="%", required=True),
    MetricSpec("logo_retention", "Logo Retention", "Customer count retention.", unit="%"),
    MetricSpec("arpu", "ARPU", "Average revenue per user.", unit="$"),
    MetricSpec("sales_cycle", "Sales Cycle", "Median days from first meeting to close.", unit="days"),
    MetricSpec("win_rate", "Win Rate", "Closed-won / total opportunities.", unit="%"),
    MetricSpec("pipeline_coverage", "Pipeline Coverage", "Pipeline / target bookings.", unit="x"),
    MetricSpec("magic_number", "SaaS Magic Number", "New ARR growth / prior quarter S&M expense.", unit="x"),
)


FOUNDER_RUBRIC = Rubric(
    perspective=Perspective.FOUNDER,
    required_documents=(
        RubricCategory("Corporate", (
            "Certificate of Incorporation",
            "Articles of Association",
            "Board Resolutions",
            "Shareholder Agreements",
            "Director & Officer Insurance",
            "Option Pool Setup / ESOP Rules",
            "Board Minutes Archive",
        )),
        RubricCategory("Legal", (
            "Terms of Service",
            "Privacy Policy",
            "Data Processing Agreement",
            "Employment Contracts Template",
            "NDAs (employees, contractors, partners)",
            "Litigation/Dispute Summary",
            "Regulatory Licences",
        )),
        RubricCategory("Finance", (
            "Audited Financial Statements",
            "Management Accounts",
            "Cash Flow Projections",
            "Tax Returns",
            "Bank Statements",
            "Debt Agreements / Convertible Notes",
            "Cap Table History (share issuances, SAFEs)",
            "Forecast Model (xls/pdf)",
        )),
        RubricCategory("Product", (
            "Product Roadmap",
            "Technical Architecture",
            "User Analytics Reports",
            "Security Audit Report",
            "Source Code Escrow Agreements",
            "Penetration Test Reports",
            "SLAs / Uptime Reports",
        )),
        RubricCategory("IP", (
            "Trademark Registrations",
            "Patent Applications",
            "IP Assignment Agreements",
            "Open Source Licences",
            "Background vs Foreground IP Register",
        )),
        RubricCategory("People", (
            "Employee Handbook",
            "Org Chart",
            "Equity Plan Documents",
            "Key Personnel CVs",
            "Founder/Executive Bios",
            "Employment Policies (leave, benefits)",
        )),
        RubricCategory("Operations", (
            "Operational Procedures",
            "Vendor Contracts",
            "Insurance Policies (cyber, liability, D&O)",
            "Compliance Certificates",
            "Risk Register",
            "Internal Controls Overview",
        )),
        RubricCategory("Commercial", (
            "Customer Contracts (top 10 material)",
            "Supplier/Vendor Agreements",
            "Partnership/JV Agreements",
            "Sales Pipeline Report",
            "Churn/Retention Data",
        )),
        RubricCategory("Strategic", (
            "Pitch Deck",
            "Business Plan / GTM Strategy",
            "Market Research / Competitor Analysis",
            "KPIs / Traction Reports",
            "PR Kit / Press Coverage",
            "Awards & Certifications",
            "ESG / Impact Statements",
        )),
    ),
    required_metrics=CORE_METRICS,
    sections=("Summary", "Coverage", "Recommendations", "Risks", "Open Questions", "Next Actions"),
    principles=(
        "Diagnose gaps, propose concrete fixes with owners and timelines",
        "Elevate narrative: problem, solution, market size, traction, unit economics",
        "Be concise, executive, bullet-first with strong structure",
    ),
)

INVESTOR_DILIGENCE_RUBRIC = Rubric(
    perspective=Perspective.INVESTOR_DILIGENCE,
    required_documents=(
        RubricCategory("Finance", (
            "Audited Financial Statements",
            "Management Accounts",
            "Forecast Model (xls/pdf)",
            "Revenue by Product/Segment",
            "Cohort Analysis (logo and dollar)",
            "Pricing & Packaging",
            "Churn/Retention Data",
            "Sales Pipeline & Bookings History",
        )),
        RubricCategory("Market & Strategy", (
            "Market Sizing (bottom-up)",
            "Competitive Landscape",
            "Differentiation & Moat Analysis",
            "GTM Plan",
        )),
        RubricCategory("Commercial", (
            "Top 20 Customer Contracts",
            "Customer Concentration Analysis",
            "Partner/Reseller Agreements",
        )),
        RubricCategory("Product & Tech", (
            "Roadmap & Delivery Plan",
            "Security Audit / Pen Test",
            "Architecture Overview",
            "SOC2/ISO or security policies",
        )),
        RubricCategory("People & Ops", (
            "Org Chart & Key Hires",
            "ESOP / Options Outstanding",
            "Hiring Plan",
        )),
    ),
    required_metrics=CORE_METRICS + (
        MetricSpec("cohort_m3_m6_m12", "Cohort Retention (3/6/12m)",
                   "Logo and dollar retention by cohort at 3/6/12 months.", unit="%"),
        MetricSpec("top5_concentration", "Top 5 Customer Concentration",
                   "% of revenue from top 5 customers.", unit="%"),
        MetricSpec("net_new_arr", "Net New ARR", "New + expansion - churned ARR.", unit="$"),
    ),
    sections=("Summary", "Missing Items", "Findings", "Risks", "Questions", "Valuation Notes", "Next Actions"),
    principles=(
        "Audit completeness, identify red flags and assumptions to test",
        "Be analytical and evidence-backed; call out where evidence is thin",
        "Structure by themes; be concise and decision-oriented",
    ),
)

ACQUIRER_MNA_RUBRIC = Rubric(
    perspective=Perspective.ACQUIRER_MNA,
    required_documents=(
        RubricCategory("Corporate & Legal", (
            "Cap Table History (share issuances, SAFEs)",
            "All Employee/Contractor IP Assignments",
            "Key Contracts with Change of Control Clauses",
            "Litigation/Dispute Summary",
            "Regulatory Licences",
        )),
        RubricCategory("Commercial", (
            "Top 50 Customer Contracts",
            "Revenue by Customer & Cohorts",
            "Customer Concentration & Churn",
            "Revenue Recognition Policies",
        )),
        RubricCategory("Technology & Security", (
            "Architecture Overview",
            "Security Policies & Audit Reports (SOC2/ISO)",
            "Penetration Test Reports",
            "Data Map & Privacy Impact Assessments",
            "Open Source Licence Register",
        )),
        RubricCategory("People & HR", (
            "Org Chart & Compensation Bands",
            "Key Person Dependencies",
            "Benefits & HR Policies",
        )),
        RubricCategory("Operations", (
            "Vendor List & Contracts",
            "Insurance Policies (cyber, liability, D&O)",
            "Business Continuity & DR Plans",
        )),
    ),
    required_metrics=CORE_METRICS + (
        MetricSpec("nps", "NPS", "Net Promoter Score.", unit="score"),
        MetricSpec("security_incidents_12m", "Security Incidents (12m)",
                   "Number and severity of incidents in last 12 months.", unit="count"),
        MetricSpec("revenue_concentration", "Revenue Concentration", "% revenue from top customers.", unit="%"),
        MetricSpec("support_sla", "Support SLA Adherence", "% tickets meeting SLA.", unit="%"),
    ),
    sections=("Summary", "Missing Items", "Synergies/Fit", "Risks", "Integration Notes",
              "Deal Considerations", "Next Actions"),
    principles=(
        "Audit M&A readiness; highlight integration and compliance risks",
        "Assess strategic fit and synergies; estimate integration complexity",
        "Be pragmatic, risk-aware, and action-oriented",
    ),
)


class RubricCatalog:
    """Read-only registry: perspective -> Rubric."""

    def __init__(self, rubrics: Optional[Mapping[Perspective, Rubric]] = None) -> None:
        if rubrics is None:
            rubrics = {
                Perspective.FOUNDER: FOUNDER_RUBRIC,
                Perspective.INVESTOR_DILIGENCE: INVESTOR_DILIGENCE_RUBRIC,
                Perspective.ACQUIRER_MNA: ACQUIRER_MNA_RUBRIC,
            }
        self._rubrics = MappingProxyType(dict(rubrics))

    def get(self, perspective: Perspective) -> Rubric:
        return self._rubrics[Perspective(perspective)]

    def perspectives(self) -> List[Perspective]:
        return list(self._rubrics.keys())
