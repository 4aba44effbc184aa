from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# Calculator fields stay loosely typed: the engine coerces raw form values.
NumberInput = float | str | None


class TaxRequest(BaseModel):
    gross_income: NumberInput = None
    total_deductions: NumberInput = None


class TaxResponse(BaseModel):
    tax: float
    monthly_tax: float


class SIPRequest(BaseModel):
    monthly_amount: NumberInput = None
    years: NumberInput = None
    annual_return_pct: NumberInput = 12


class SIPResponse(BaseModel):
    maturity_amount: float
    total_investment: float
    total_gains: float


class EMIRequest(BaseModel):
    loan_amount: NumberInput = None
    annual_rate_pct: NumberInput = None
    years: NumberInput = None


class EMIResponse(BaseModel):
    emi: float
    total_amount: float
    total_interest: float


class FDRequest(BaseModel):
    principal: NumberInput = None
    annual_rate_pct: NumberInput = None
    years: NumberInput = None


class FDResponse(BaseModel):
    maturity_amount: float
    interest: float


class KnowledgeItemOut(BaseModel):
    id: str
    title: str
    category: str
    keywords: list[str]
    content: str


class ContextResponse(BaseModel):
    query: str
    context: str


class UserDocumentIn(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1)
    type: str = "text/plain"
    content: str = Field(min_length=1)


class AddDocumentsRequest(BaseModel):
    documents: list[UserDocumentIn]


class UserDocumentOut(BaseModel):
    id: str
    name: str
    type: str
    content: str


class DocumentAnalysisOut(BaseModel):
    document_type: str
    fields: dict[str, Any] | None = None
    missing_fields: list[str] = Field(default_factory=list)
    confidence: float = 0.0
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class AnalyzedDocumentOut(UserDocumentOut):
    size: int
    analysis: DocumentAnalysisOut


class RejectedFile(BaseModel):
    name: str
    reason: str


class AddDocumentsResponse(BaseModel):
    added: int
    documents: list[UserDocumentOut] = Field(default_factory=list)


class UploadDocumentsResponse(BaseModel):
    added: int
    documents: list[AnalyzedDocumentOut] = Field(default_factory=list)
    rejected: list[RejectedFile] = Field(default_factory=list)


class RemoveDocumentResponse(BaseModel):
    removed: int


class StatsResponse(BaseModel):
    knowledge_count: int
    document_count: int


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    use_knowledge: bool = True


class QuickActionRequest(BaseModel):
    action: str = Field(min_length=1)


class ChatHistoryMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatResponse(BaseModel):
    answer: str
    grounded: bool
    context: str = ""
    refusal_reason: str | None = None
    error: str | None = None
    request_id: str
    history: list[ChatHistoryMessage] = Field(default_factory=list)


class ResetResponse(BaseModel):
    reset: bool
