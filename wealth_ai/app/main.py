from __future__ import annotations

"""FastAPI application entrypoint for the Wealth AI advisory service."""

import dataclasses
import logging
import uuid

from fastapi import FastAPI, File, HTTPException, Request, UploadFile

from wealth_ai.app.dependencies import get_advisor, get_store
from wealth_ai.app.metrics import (
    metrics_middleware,
    metrics_response,
    record_calculation,
    record_chat_reply,
)
from wealth_ai.app.schemas import (
    AddDocumentsRequest,
    AddDocumentsResponse,
    AnalyzedDocumentOut,
    ChatHistoryMessage,
    ChatRequest,
    ChatResponse,
    ContextResponse,
    DocumentAnalysisOut,
    EMIRequest,
    EMIResponse,
    FDRequest,
    FDResponse,
    KnowledgeItemOut,
    QuickActionRequest,
    RejectedFile,
    RemoveDocumentResponse,
    ResetResponse,
    SIPRequest,
    SIPResponse,
    StatsResponse,
    TaxRequest,
    TaxResponse,
    UploadDocumentsResponse,
    UserDocumentOut,
)
from wealth_ai.app.settings import settings
from wealth_ai.calculators.engine import compute_emi, compute_fd, compute_sip, compute_tax
from wealth_ai.documents.analysis import analyze_document
from wealth_ai.documents.loaders import DocumentLoaderError, load_upload
from wealth_ai.knowledge.types import KnowledgeItem, UserDocument
from wealth_ai.rag.advisor import AdvisorReply, ChatAdvisor
from wealth_ai.rag.llm import LLMError

logger = logging.getLogger(__name__)

app = FastAPI(title="Wealth AI Advisor", version="0.1.0")


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


_configure_logging()


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _knowledge_out(item: KnowledgeItem) -> KnowledgeItemOut:
    return KnowledgeItemOut(
        id=item.id,
        title=item.title,
        category=item.category,
        keywords=list(item.keywords),
        content=item.content,
    )


def _document_out(document: UserDocument) -> UserDocumentOut:
    return UserDocumentOut(
        id=document.id,
        name=document.name,
        type=document.type,
        content=document.content,
    )


def _advisor() -> ChatAdvisor:
    """Resolve the chat advisor, mapping provider misconfiguration to 503."""
    try:
        return get_advisor()
    except LLMError as exc:
        logger.error("advisor_unavailable", extra={"detail": str(exc)})
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _chat_response(reply: AdvisorReply, advisor: ChatAdvisor, request_id: str) -> ChatResponse:
    if reply.refusal_reason:
        outcome = "refused"
    elif reply.error:
        outcome = "fallback"
    else:
        outcome = "answered"
    record_chat_reply(outcome)
    return ChatResponse(
        answer=reply.answer,
        grounded=reply.grounded,
        context=reply.context,
        refusal_reason=reply.refusal_reason,
        error="llm_error" if reply.error else None,
        request_id=request_id,
        history=[ChatHistoryMessage(**turn) for turn in advisor.history],
    )


async def _read_upload_bytes(upload: UploadFile, max_bytes: int | None) -> bytes | None:
    """Read an upload, returning None once it exceeds the size limit."""
    if not max_bytes or max_bytes <= 0:
        return await upload.read()
    buffer = bytearray()
    while True:
        chunk = await upload.read(65536)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            return None
    return bytes(buffer)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/health")
async def health() -> dict[str, str]:
    """Simple health probe for uptime checks."""
    return {"status": "ok"}


@app.get("/stats", response_model=StatsResponse)
async def stats() -> StatsResponse:
    return StatsResponse(**get_store().stats())


@app.post("/calculators/tax", response_model=TaxResponse)
async def tax_calculator(request: TaxRequest) -> TaxResponse:
    result = compute_tax(request.gross_income, request.total_deductions)
    record_calculation("tax")
    return TaxResponse(tax=result.tax, monthly_tax=result.tax / 12)


@app.post("/calculators/sip", response_model=SIPResponse)
async def sip_calculator(request: SIPRequest) -> SIPResponse:
    result = compute_sip(request.monthly_amount, request.years, request.annual_return_pct)
    record_calculation("sip")
    return SIPResponse(**dataclasses.asdict(result))


@app.post("/calculators/emi", response_model=EMIResponse)
async def emi_calculator(request: EMIRequest) -> EMIResponse:
    result = compute_emi(request.loan_amount, request.annual_rate_pct, request.years)
    record_calculation("emi")
    return EMIResponse(**dataclasses.asdict(result))


@app.post("/calculators/fd", response_model=FDResponse)
async def fd_calculator(request: FDRequest) -> FDResponse:
    result = compute_fd(request.principal, request.annual_rate_pct, request.years)
    record_calculation("fd")
    return FDResponse(**dataclasses.asdict(result))


@app.get("/knowledge", response_model=list[KnowledgeItemOut])
async def list_knowledge() -> list[KnowledgeItemOut]:
    """Return the full knowledge library in catalog order."""
    return [_knowledge_out(item) for item in get_store().get_all_knowledge()]


@app.get("/knowledge/search", response_model=list[KnowledgeItemOut])
async def search_knowledge(q: str = "") -> list[KnowledgeItemOut]:
    return [_knowledge_out(item) for item in get_store().search_knowledge(q)]


@app.get("/knowledge/context", response_model=ContextResponse)
async def knowledge_context(q: str = "") -> ContextResponse:
    """Return the grounding text the advisor would send for a query."""
    context = get_store().get_relevant_context(q, limit=settings.context_items)
    return ContextResponse(query=q, context=context)


@app.get("/knowledge/{item_id}", response_model=KnowledgeItemOut)
async def get_knowledge(item_id: str) -> KnowledgeItemOut:
    item = get_store().get_knowledge_by_id(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Knowledge item not found")
    return _knowledge_out(item)


@app.get("/documents", response_model=list[UserDocumentOut])
async def list_documents() -> list[UserDocumentOut]:
    return [_document_out(doc) for doc in get_store().documents]


@app.post("/documents", response_model=AddDocumentsResponse)
async def add_documents(request: AddDocumentsRequest) -> AddDocumentsResponse:
    """Add already-decoded documents to the session collection."""
    if not request.documents:
        raise HTTPException(status_code=400, detail="No documents provided")
    documents = [
        UserDocument(
            id=doc.id or uuid.uuid4().hex,
            name=doc.name,
            type=doc.type,
            content=doc.content,
        )
        for doc in request.documents
    ]
    added = get_store().add_documents(documents)
    return AddDocumentsResponse(added=added, documents=[_document_out(doc) for doc in documents])


@app.post("/documents/files", response_model=UploadDocumentsResponse)
async def upload_documents(
    http_request: Request,
    files: list[UploadFile] = File(...),
) -> UploadDocumentsResponse:
    """Load, analyze and store uploaded files; unusable files are reported, not fatal."""
    if not files:
        raise HTTPException(status_code=400, detail="No files provided")
    request_id = _request_id(http_request)
    accepted: list[AnalyzedDocumentOut] = []
    rejected: list[RejectedFile] = []
    documents: list[UserDocument] = []
    for idx, upload in enumerate(files, start=1):
        filename = upload.filename or f"upload-{idx}"
        data = await _read_upload_bytes(upload, settings.upload_max_bytes)
        reason = None
        if data is None:
            reason = f"File too large: {filename}"
        elif not data:
            reason = f"Empty file: {filename}"
        else:
            try:
                content_type, content = load_upload(data, filename, upload.content_type)
            except DocumentLoaderError as exc:
                reason = str(exc)
        if reason is not None:
            logger.warning(
                "document_rejected",
                extra={"request_id": request_id, "source_name": filename, "detail": reason},
            )
            rejected.append(RejectedFile(name=filename, reason=reason))
            continue
        document = UserDocument(
            id=uuid.uuid4().hex,
            name=filename,
            type=content_type,
            content=content,
        )
        analysis = analyze_document(filename, content)
        documents.append(document)
        accepted.append(
            AnalyzedDocumentOut(
                id=document.id,
                name=document.name,
                type=document.type,
                content=document.content,
                size=len(data),
                analysis=DocumentAnalysisOut(
                    document_type=analysis.document_type,
                    fields=dataclasses.asdict(analysis.fields) if analysis.fields else None,
                    missing_fields=analysis.missing_fields,
                    confidence=analysis.confidence,
                    insights=analysis.insights,
                    recommendations=analysis.recommendations,
                ),
            )
        )
    added = get_store().add_documents(documents) if documents else 0
    return UploadDocumentsResponse(added=added, documents=accepted, rejected=rejected)


@app.get("/documents/search", response_model=list[UserDocumentOut])
async def search_documents(q: str = "") -> list[UserDocumentOut]:
    return [_document_out(doc) for doc in get_store().search_user_documents(q)]


@app.delete("/documents/{document_id}", response_model=RemoveDocumentResponse)
async def remove_document(document_id: str) -> RemoveDocumentResponse:
    return RemoveDocumentResponse(removed=get_store().remove_document(document_id))


@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, http_request: Request) -> ChatResponse:
    """Answer a user message, grounded in the knowledge library by default."""
    advisor = _advisor()
    reply = await advisor.chat(request.message, use_knowledge=request.use_knowledge)
    return _chat_response(reply, advisor, _request_id(http_request))


@app.post("/chat/quick-action", response_model=ChatResponse)
async def quick_action(request: QuickActionRequest, http_request: Request) -> ChatResponse:
    advisor = _advisor()
    reply = await advisor.quick_action(request.action)
    return _chat_response(reply, advisor, _request_id(http_request))


@app.post("/chat/reset", response_model=ResetResponse)
async def reset_chat() -> ResetResponse:
    _advisor().reset_history()
    return ResetResponse(reset=True)
