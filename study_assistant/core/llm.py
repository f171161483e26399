from __future__ import annotations

from typing import Any, Optional, cast

from langchain_core.language_models.chat_models import BaseChatModel

from study_assistant.core.ai_models import AIModelConfig


def _build_groq(*, capability: str, temperature: float) -> BaseChatModel | None:
    if not AIModelConfig.is_groq_available():
        return None
    from langchain_groq import ChatGroq

    return ChatGroq(
        model=AIModelConfig.get_groq_model_for_capability(capability),
        temperature=temperature,
        api_key=cast(Any, AIModelConfig.GROQ_API_KEY),
    )


def _build_gemini(*, temperature: float) -> BaseChatModel | None:
    if not AIModelConfig.is_gemini_available():
        return None
    from langchain_google_genai import ChatGoogleGenerativeAI

    return ChatGoogleGenerativeAI(
        model=AIModelConfig.GEMINI_MODEL_NAME,
        temperature=temperature,
        google_api_key=AIModelConfig.GEMINI_API_KEY,
    )


def get_llm(
    temperature: Optional[float] = None,
    capability: str = "CHAT",
    prefer_provider: str = "auto",
) -> BaseChatModel:
    """
    Returns the configured chat model for a capability.
    Gemini is preferred for long-form generation, Groq is the fallback.
    """

    cap = (capability or "CHAT").strip().upper()
    temp = AIModelConfig.get_temperature_for_capability(cap) if temperature is None else float(temperature)

    preference = (prefer_provider or "auto").strip().lower()
    if preference not in {"auto", "groq", "gemini"}:
        preference = "auto"

    if preference == "groq":
        provider_order = ["groq", "gemini"]
    else:
        provider_order = ["gemini", "groq"]

    for provider in provider_order:
        if provider == "groq":
            model = _build_groq(capability=cap, temperature=temp)
        else:
            model = _build_gemini(temperature=temp)
        if model is not None:
            return model

    raise ValueError("No valid AI Provider found (GEMINI_API_KEY or GROQ_API_KEY required).")
