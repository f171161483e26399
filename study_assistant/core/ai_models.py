"""
Centralized AI model configuration for the study assistant.
All generation adapters read model names and temperatures from here.
"""

from study_assistant.core.settings import settings


class AIModelConfig:
    # Gemini Configuration
    GEMINI_API_KEY = settings.GEMINI_API_KEY
    GEMINI_MODEL_NAME = "gemini-1.5-pro"

    # Groq Configuration
    GROQ_API_KEY = settings.GROQ_API_KEY
    GROQ_MODEL_LIGHTWEIGHT = "openai/gpt-oss-20b"
    GROQ_MODEL_HEAVY = "openai/gpt-oss-120b"

    # Default Temperatures
    DEFAULT_TEMPERATURE_CHAT = 0.2
    DEFAULT_TEMPERATURE_TOPIC_CONTENT = 0.3
    DEFAULT_TEMPERATURE_ASSISTANT = 0.2

    _GROQ_MODEL_BY_CAPABILITY = {
        "CHAT": GROQ_MODEL_LIGHTWEIGHT,
        "TOPIC_CONTENT": GROQ_MODEL_HEAVY,
        "ASSISTANT": GROQ_MODEL_HEAVY,
    }

    _TEMPERATURE_BY_CAPABILITY = {
        "CHAT": DEFAULT_TEMPERATURE_CHAT,
        "TOPIC_CONTENT": DEFAULT_TEMPERATURE_TOPIC_CONTENT,
        "ASSISTANT": DEFAULT_TEMPERATURE_ASSISTANT,
    }

    @classmethod
    def is_gemini_available(cls) -> bool:
        return bool(cls.GEMINI_API_KEY)

    @classmethod
    def is_groq_available(cls) -> bool:
        return bool(cls.GROQ_API_KEY)

    @classmethod
    def get_groq_model_for_capability(cls, capability: str) -> str:
        normalized = (capability or "CHAT").strip().upper()
        return cls._GROQ_MODEL_BY_CAPABILITY.get(normalized, cls.GROQ_MODEL_LIGHTWEIGHT)

    @classmethod
    def get_temperature_for_capability(cls, capability: str) -> float:
        normalized = (capability or "CHAT").strip().upper()
        return cls._TEMPERATURE_BY_CAPABILITY.get(normalized, cls.DEFAULT_TEMPERATURE_CHAT)
