from __future__ import annotations

"""Document-type detection and regex field extraction for uploaded statements.

Each document type has its own field record. Fields that could not be found are
left as ``None`` and listed in ``DocumentAnalysis.missing_fields``; the
``confidence`` score is the share of expected fields that were found.
"""

import re
from dataclasses import dataclass, field, fields
from typing import Literal, Union

from wealth_ai.calculators.formatting import format_inr

DocumentType = Literal[
    "form16",
    "salary_slip",
    "loan_statement",
    "investment_statement",
    "other",
]

_AMOUNT = r"(\d+(?:,\d+)*(?:\.\d+)?)"
_GROSS_SALARY_RE = re.compile(rf"(?:gross salary|gross income).*?{_AMOUNT}", re.IGNORECASE)
_TAX_DEDUCTED_RE = re.compile(rf"(?:tax deducted|tds).*?{_AMOUNT}", re.IGNORECASE)
_LOAN_AMOUNT_RE = re.compile(rf"(?:loan amount|principal).*?{_AMOUNT}", re.IGNORECASE)
_EMI_RE = re.compile(rf"(?:emi|monthly payment).*?{_AMOUNT}", re.IGNORECASE)
_INTEREST_RATE_RE = re.compile(
    r"(?:interest rate|rate of interest).*?(\d+(?:\.\d+)?)", re.IGNORECASE
)
_INVESTMENT_RE = re.compile(
    rf"(?:amount invested|investment amount|total investment|invested amount).*?{_AMOUNT}",
    re.IGNORECASE,
)
_GAINS_RE = re.compile(
    rf"(?:total gains|capital gains|unrealised gains|unrealized gains|gains).*?{_AMOUNT}",
    re.IGNORECASE,
)
_FINANCIAL_YEAR_RE = re.compile(
    r"(?:financial year|fy|assessment year).*?(\d{4}-\d{2,4})", re.IGNORECASE
)
_EMPLOYER_RE = re.compile(
    r"(?:employer(?: name)?|company name)\s*[:\-]?\s*([A-Za-z][A-Za-z &.]*)", re.IGNORECASE
)


@dataclass(frozen=True)
class Form16Fields:
    document_type: Literal["form16"] = "form16"
    gross_salary: float | None = None
    tax_deducted: float | None = None
    employer_name: str | None = None
    financial_year: str | None = None


@dataclass(frozen=True)
class SalarySlipFields:
    document_type: Literal["salary_slip"] = "salary_slip"
    gross_salary: float | None = None
    tax_deducted: float | None = None


@dataclass(frozen=True)
class LoanStatementFields:
    document_type: Literal["loan_statement"] = "loan_statement"
    loan_amount: float | None = None
    emi_amount: float | None = None
    interest_rate: float | None = None


@dataclass(frozen=True)
class InvestmentStatementFields:
    document_type: Literal["investment_statement"] = "investment_statement"
    investment_amount: float | None = None
    gains: float | None = None


ExtractedFields = Union[
    Form16Fields,
    SalarySlipFields,
    LoanStatementFields,
    InvestmentStatementFields,
]


@dataclass(frozen=True)
class DocumentAnalysis:
    document_type: DocumentType
    fields: ExtractedFields | None
    missing_fields: list[str] = field(default_factory=list)
    confidence: float = 0.0
    insights: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def detect_document_type(file_name: str, content: str) -> DocumentType:
    """Guess the statement type from the file name and text."""
    name = file_name.lower()
    text = content.lower()
    if "form16" in name or "form-16" in name or "form 16" in text:
        return "form16"
    if "salary" in name or "salary slip" in text or "pay slip" in text:
        return "salary_slip"
    if "loan" in name or "loan statement" in text or "emi" in text:
        return "loan_statement"
    if "investment" in text or "mutual fund" in text or "portfolio" in text:
        return "investment_statement"
    return "other"


def _amount(pattern: re.Pattern[str], content: str) -> float | None:
    match = pattern.search(content)
    if not match:
        return None
    return float(match.group(1).replace(",", ""))


def _text(pattern: re.Pattern[str], content: str) -> str | None:
    match = pattern.search(content)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def extract_fields(content: str, document_type: DocumentType) -> ExtractedFields | None:
    """Pull the fields relevant to ``document_type`` out of raw text."""
    if document_type == "form16":
        return Form16Fields(
            gross_salary=_amount(_GROSS_SALARY_RE, content),
            tax_deducted=_amount(_TAX_DEDUCTED_RE, content),
            employer_name=_text(_EMPLOYER_RE, content),
            financial_year=_text(_FINANCIAL_YEAR_RE, content),
        )
    if document_type == "salary_slip":
        return SalarySlipFields(
            gross_salary=_amount(_GROSS_SALARY_RE, content),
            tax_deducted=_amount(_TAX_DEDUCTED_RE, content),
        )
    if document_type == "loan_statement":
        return LoanStatementFields(
            loan_amount=_amount(_LOAN_AMOUNT_RE, content),
            emi_amount=_amount(_EMI_RE, content),
            interest_rate=_amount(_INTEREST_RATE_RE, content),
        )
    if document_type == "investment_statement":
        return InvestmentStatementFields(
            investment_amount=_amount(_INVESTMENT_RE, content),
            gains=_amount(_GAINS_RE, content),
        )
    return None


def missing_fields(extracted: ExtractedFields | None) -> list[str]:
    if extracted is None:
        return []
    return [
        item.name
        for item in fields(extracted)
        if item.name != "document_type" and getattr(extracted, item.name) is None
    ]


def extraction_confidence(extracted: ExtractedFields | None) -> float:
    """Share of expected fields that were found."""
    if extracted is None:
        return 0.0
    expected = [item.name for item in fields(extracted) if item.name != "document_type"]
    if not expected:
        return 0.0
    found = len(expected) - len(missing_fields(extracted))
    return found / len(expected)


def generate_insights(extracted: ExtractedFields | None) -> list[str]:
    insights: list[str] = []
    if isinstance(extracted, Form16Fields) and extracted.gross_salary and extracted.tax_deducted:
        tax_rate = extracted.tax_deducted / extracted.gross_salary * 100
        insights.append(f"Your effective tax rate is {tax_rate:.1f}%")
        if tax_rate > 20:
            insights.append("Your tax rate is quite high - consider tax-saving investments")
        if extracted.gross_salary > 1_000_000:
            insights.append("You're in the highest tax bracket - maximize 80C deductions")
    if (
        isinstance(extracted, LoanStatementFields)
        and extracted.loan_amount
        and extracted.interest_rate
    ):
        if extracted.interest_rate > 8:
            insights.append(
                "Your loan interest rate is above market average - consider refinancing"
            )
        if extracted.loan_amount > 5_000_000:
            insights.append(
                "Consider claiming tax benefits under Section 24(b) for home loan interest"
            )
    if isinstance(extracted, SalarySlipFields) and extracted.gross_salary:
        target = extracted.gross_salary * 0.2
        insights.append(f"Target monthly savings: {format_inr(target)}")
    return insights


_RECOMMENDATIONS: dict[str, tuple[str, ...]] = {
    "form16": (
        "Maximize Section 80C investments (₹1.5L limit)",
        "Consider health insurance for 80D benefits",
        "Explore ELSS mutual funds for tax savings",
    ),
    "loan_statement": (
        "Track loan payments for tax benefits",
        "Consider prepayment if you have surplus funds",
        "Review loan terms annually for better rates",
    ),
    "salary_slip": (
        "Set up automatic SIP investments",
        "Build an emergency fund (6-12 months expenses)",
        "Review salary structure for tax optimization",
    ),
}


def generate_recommendations(document_type: DocumentType) -> list[str]:
    return list(_RECOMMENDATIONS.get(document_type, ()))


def analyze_document(file_name: str, content: str) -> DocumentAnalysis:
    """Detect, extract and summarise one uploaded document."""
    document_type = detect_document_type(file_name, content)
    extracted = extract_fields(content, document_type)
    return DocumentAnalysis(
        document_type=document_type,
        fields=extracted,
        missing_fields=missing_fields(extracted),
        confidence=extraction_confidence(extracted),
        insights=generate_insights(extracted),
        recommendations=generate_recommendations(document_type),
    )
