from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    log_level: str = os.getenv("WEALTH_LOG_LEVEL", "INFO")
    llm_provider_raw: str = os.getenv("WEALTH_LLM_PROVIDER", "groq")
    groq_api_key: str | None = os.getenv("GROQ_API_KEY")
    groq_base_url: str = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
    groq_model: str = os.getenv("GROQ_MODEL", "llama3-8b-8192")
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_chat_model: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3")
    llm_temperature: float = float(os.getenv("WEALTH_LLM_TEMPERATURE", "0.3"))
    llm_max_tokens: int = int(os.getenv("WEALTH_LLM_MAX_TOKENS", "1000"))
    llm_top_p: float = float(os.getenv("WEALTH_LLM_TOP_P", "0.9"))
    llm_timeout: float = float(os.getenv("WEALTH_LLM_TIMEOUT", "30"))
    context_items: int = int(os.getenv("WEALTH_CONTEXT_ITEMS", "2"))
    chat_history_messages: int = int(os.getenv("WEALTH_CHAT_HISTORY_MESSAGES", "20"))
    upload_max_bytes: int = int(os.getenv("WEALTH_UPLOAD_MAX_BYTES", "10485760"))
    metrics_enabled: bool = os.getenv("WEALTH_METRICS_ENABLED", "true").lower() in {
        "1",
        "true",
        "yes",
    }

    @property
    def llm_provider(self) -> str:
        return os.getenv("WEALTH_LLM_PROVIDER", self.llm_provider_raw).strip().lower()

    @property
    def llm_api_key(self) -> str | None:
        if self.llm_provider == "openai":
            return os.getenv("OPENAI_API_KEY", self.openai_api_key or "") or None
        return os.getenv("GROQ_API_KEY", self.groq_api_key or "") or None

    @property
    def llm_base_url(self) -> str:
        if self.llm_provider == "openai":
            return self.openai_base_url
        if self.llm_provider == "groq":
            return self.groq_base_url
        return self.ollama_base_url

    @property
    def llm_model(self) -> str:
        if self.llm_provider == "openai":
            return self.openai_chat_model
        if self.llm_provider == "groq":
            return self.groq_model
        return self.ollama_model


settings = Settings()
