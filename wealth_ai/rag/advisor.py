from __future__ import annotations

"""Chat orchestration: grounding, conversation history and quick actions."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from wealth_ai.knowledge.store import RetrievalStore
from wealth_ai.rag.llm import LLMError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are Wealth AI, an experienced Chartered Accountant who advises clients on "
    "personal finance, tax-saving strategies, and investments.\n\n"
    "Answer in a professional, trustworthy, and concise manner.\n\n"
    "Provide just the right balance: not too much detail to overwhelm, but not too "
    "little that it lacks clarity.\n\n"
    "Structure responses in a neat, numbered or bulleted format.\n\n"
    "Always suggest actionable, compliant advice based on Indian tax laws "
    "(e.g., Section 80C, 80D, capital gains, etc.) and general best practices in "
    "personal finance.\n\n"
    "If a user asks something outside your scope, politely decline and suggest "
    "consulting a certified professional.\n\n"
    "Maintain the tone of a seasoned CA speaking directly to their client."
)

FALLBACK_REPLY = "There was a technical issue. Please try again later."
DEFAULT_ACTION_PROMPT = "Provide general financial advice and guidance."

QUICK_ACTION_PROMPTS: dict[str, str] = {
    "section-80c": (
        "Explain Section 80C tax deductions available in India with current limits "
        "and best investment options."
    ),
    "sip-calculator": (
        "Explain SIP (Systematic Investment Plan) benefits and provide guidance on "
        "calculating returns."
    ),
    "tax-planning": "Provide tax planning strategies for the current financial year in India.",
    "emi-planning": "Explain EMI planning and how to calculate affordable loan amounts.",
    "investment-portfolio": "Provide guidance on building a balanced investment portfolio.",
    "retirement-planning": (
        "Explain retirement planning strategies and required corpus calculation."
    ),
}


class ChatClient(Protocol):
    async def complete(self, messages: list[dict[str, str]]) -> str:
        ...


@dataclass(frozen=True)
class AdvisorReply:
    """Reply returned to the caller along with how it was produced."""
    answer: str
    context: str = ""
    refusal_reason: str | None = None
    error: str | None = None

    @property
    def grounded(self) -> bool:
        return bool(self.context)


def build_user_turn(message: str, context: str) -> str:
    """Prefix the question with grounding context when there is any."""
    if not context:
        return message
    return f"Context:\n{context}\n\nUser question: {message}"


@dataclass
class ChatAdvisor:
    """One advisory conversation backed by a chat client and a retrieval store."""
    client: ChatClient
    store: RetrievalStore
    system_prompt: str = SYSTEM_PROMPT
    max_history_messages: int = 20
    context_items: int = 2
    _history: list[dict[str, str]] = field(default_factory=list, init=False, repr=False)

    @property
    def history(self) -> list[dict[str, str]]:
        return [dict(turn) for turn in self._history]

    async def chat(self, message: str, use_knowledge: bool = True) -> AdvisorReply:
        """Answer a user message, grounding it in the knowledge library when enabled."""
        if not message.strip():
            return AdvisorReply(answer="", refusal_reason="empty_message")
        context = ""
        if use_knowledge:
            context = self.store.get_relevant_context(message.strip(), limit=self.context_items)
        messages = [
            {"role": "system", "content": self.system_prompt},
            *self.history,
            {"role": "user", "content": build_user_turn(message, context)},
        ]
        error: str | None = None
        try:
            answer = await self.client.complete(messages)
        except LLMError as exc:
            logger.error("llm_failed", extra={"detail": type(exc).__name__})
            answer = FALLBACK_REPLY
            error = str(exc)
        self._remember(message, answer)
        logger.info(
            "chat_complete",
            extra={
                "grounded": bool(context),
                "history_messages": len(self._history),
                "failed": error is not None,
            },
        )
        return AdvisorReply(answer=answer, context=context, error=error)

    async def quick_action(self, action_type: str) -> AdvisorReply:
        """Answer one of the canned sidebar prompts."""
        prompt = QUICK_ACTION_PROMPTS.get(action_type.strip().lower(), DEFAULT_ACTION_PROMPT)
        return await self.chat(prompt, use_knowledge=False)

    def reset_history(self) -> None:
        self._history = []

    def _remember(self, question: str, answer: str) -> None:
        self._history.append({"role": "user", "content": question})
        self._history.append({"role": "assistant", "content": answer})
        if self.max_history_messages > 0 and len(self._history) > self.max_history_messages:
            self._history = self._history[-self.max_history_messages :]
