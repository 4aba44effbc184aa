from __future__ import annotations

"""Chat-completion clients for the advisor."""

from dataclasses import dataclass

import httpx


class LLMError(RuntimeError):
    """Raised when LLM requests fail or responses are invalid."""
    pass


EMPTY_REPLY = "Sorry, I couldn't process that."


@dataclass(frozen=True)
class ChatCompletionClient:
    """Client for OpenAI-compatible chat completions (Groq, OpenAI)."""
    api_key: str
    base_url: str
    model: str
    temperature: float = 0.3
    max_tokens: int = 1000
    top_p: float = 0.9
    timeout: float = 30.0
    transport: httpx.AsyncBaseTransport | None = None

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Send the conversation and return the assistant reply text."""
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "stream": False,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise LLMError(
                f"Chat API error: {exc.response.status_code} - {exc.response.text}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise LLMError(str(exc)) from exc

        choices = data.get("choices") or []
        if not choices:
            return EMPTY_REPLY
        message = choices[0].get("message") or {}
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            return EMPTY_REPLY
        return content.strip()


@dataclass(frozen=True)
class OllamaChatClient:
    """Client for the Ollama chat API."""
    base_url: str
    model: str
    temperature: float = 0.3
    max_tokens: int = 1000
    top_p: float = 0.9
    timeout: float = 30.0
    transport: httpx.AsyncBaseTransport | None = None

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Send the conversation and return the assistant reply text."""
        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
                "top_p": self.top_p,
            },
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/api/chat", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise LLMError(
                f"Ollama error: {exc.response.status_code} - {exc.response.text}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise LLMError(str(exc)) from exc

        message = data.get("message") or {}
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            return EMPTY_REPLY
        return content.strip()


def build_chat_client(
    provider: str,
    *,
    api_key: str | None,
    base_url: str,
    model: str,
    temperature: float,
    max_tokens: int,
    top_p: float,
    timeout: float,
) -> ChatCompletionClient | OllamaChatClient:
    """Factory for chat clients based on provider."""
    normalized = provider.strip().lower()
    if normalized in {"groq", "openai"}:
        if not api_key:
            env_name = "GROQ_API_KEY" if normalized == "groq" else "OPENAI_API_KEY"
            raise LLMError(f"{env_name} is required for {normalized} provider")
        return ChatCompletionClient(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            top_p=top_p,
            timeout=timeout,
        )
    return OllamaChatClient(
        base_url=base_url.rstrip("/"),
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        top_p=top_p,
        timeout=timeout,
    )
