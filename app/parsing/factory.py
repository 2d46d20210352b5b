from typing import ClassVar

from app.config.settings import Settings
from app.parsing.base import BaseResumeParser
from app.parsing.example_client_adapter import ExampleClientAdapter
from app.parsing.openai_client_adapter import OpenAIClientAdapter
from app.parsing.parser import ResumeParser


class ParserFactory:
    """Creates the resume parser for the configured AI provider."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseResumeParser:
        """Create a configured parser from application settings."""
        provider = settings.parser_provider.strip().lower()
        if provider == "example":
            return ResumeParser(client=ExampleClientAdapter(), model="example")

        base_url = cls._resolve_base_url(provider, settings)
        model = cls._provider_setting(provider, "model_name", settings)
        if not model:
            raise ValueError(f"parser_{provider}_model_name is required for parser_provider={provider}")
        client = OpenAIClientAdapter(
            api_key=cls._provider_setting(provider, "api_key", settings) or "",
            timeout_seconds=cls._provider_setting(provider, "timeout_seconds", settings) or 60,
            base_url=base_url,
        )
        temperature = settings.parser_openai_temperature if provider == "openai" else 0.0
        return ResumeParser(client=client, model=model, temperature=temperature)

    @classmethod
    def supported_providers(cls) -> list[str]:
        return ["example", "openai", "openai_compatible", *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS)]

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.parser_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "parser_openai_compatible_base_url is required for "
                    "parser_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        raise ValueError(
            f"Unknown parser provider '{provider}'. Choose from: {cls.supported_providers()}"
        )

    @staticmethod
    def _provider_setting(provider: str, name: str, settings: Settings):  # type: ignore[no-untyped-def]
        return getattr(settings, f"parser_{provider}_{name}")
