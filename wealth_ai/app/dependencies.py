from __future__ import annotations

from functools import lru_cache

from wealth_ai.app.settings import settings
from wealth_ai.knowledge.store import RetrievalStore
from wealth_ai.rag.advisor import ChatAdvisor
from wealth_ai.rag.llm import ChatCompletionClient, OllamaChatClient, build_chat_client


@lru_cache
def get_store() -> RetrievalStore:
    return RetrievalStore()


def build_client() -> ChatCompletionClient | OllamaChatClient:
    return build_chat_client(
        settings.llm_provider,
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        top_p=settings.llm_top_p,
        timeout=settings.llm_timeout,
    )


@lru_cache
def get_advisor() -> ChatAdvisor:
    return ChatAdvisor(
        client=build_client(),
        store=get_store(),
        max_history_messages=settings.chat_history_messages,
        context_items=settings.context_items,
    )


def reset_caches() -> None:
    get_advisor.cache_clear()
    get_store.cache_clear()
