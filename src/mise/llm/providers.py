"""
Mise - Provider Catalogue.

Every provider here speaks the OpenAI chat-completions protocol at
`base_url`. Free providers need no credit card.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProviderConfig:
    id: str
    name: str
    base_url: str
    default_model: str
    is_free: bool = False
    free_models: tuple[str, ...] = field(default_factory=tuple)
    dashboard_url: str = ""


PROVIDERS: dict[str, ProviderConfig] = {
    # ===== Free =====
    "cerebras": ProviderConfig(
        id="cerebras",
        name="Cerebras",
        base_url="https://api.cerebras.ai/v1",
        default_model="llama-3.3-70b",
        is_free=True,
        free_models=("llama-3.3-70b", "llama-3.1-8b", "qwen-3-32b"),
        dashboard_url="https://cloud.cerebras.ai/",
    ),
    "google": ProviderConfig(
        id="google",
        name="Google AI Studio",
        base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
        default_model="gemini-2.5-flash",
        is_free=True,
        free_models=("gemini-2.5-flash", "gemini-2.5-flash-lite", "gemini-2.0-flash"),
        dashboard_url="https://aistudio.google.com/apikey",
    ),
    "groq": ProviderConfig(
        id="groq",
        name="Groq",
        base_url="https://api.groq.com/openai/v1",
        default_model="llama-3.3-70b-versatile",
        is_free=True,
        free_models=("llama-3.3-70b-versatile", "llama-3.1-8b-instant", "qwen/qwen3-32b"),
        dashboard_url="https://console.groq.com/keys",
    ),
    "huggingface": ProviderConfig(
        id="huggingface",
        name="Hugging Face",
        base_url="https://router.huggingface.co/v1",
        default_model="meta-llama/Llama-3.1-8B-Instruct",
        is_free=True,
        free_models=("meta-llama/Llama-3.1-8B-Instruct", "Qwen/Qwen2.5-72B-Instruct"),
        dashboard_url="https://huggingface.co/settings/tokens",
    ),
    "openrouter": ProviderConfig(
        id="openrouter",
        name="OpenRouter",
        base_url="https://openrouter.ai/api/v1",
        default_model="meta-llama/llama-3.3-70b-instruct:free",
        is_free=True,
        free_models=(
            "meta-llama/llama-3.3-70b-instruct:free",
            "deepseek/deepseek-chat:free",
            "qwen/qwen-2.5-72b-instruct:free",
            "mistralai/mistral-small-24b-instruct-2501:free",
        ),
        dashboard_url="https://openrouter.ai/settings/keys",
    ),
    # ===== Paid =====
    "anthropic": ProviderConfig(
        id="anthropic",
        name="Anthropic",
        base_url="https://api.anthropic.com/v1/",
        default_model="claude-sonnet-4-20250514",
        dashboard_url="https://console.anthropic.com/settings/keys",
    ),
    "deepseek": ProviderConfig(
        id="deepseek",
        name="DeepSeek",
        base_url="https://api.deepseek.com",
        default_model="deepseek-chat",
        dashboard_url="https://platform.deepseek.com/api_keys",
    ),
    "fireworks": ProviderConfig(
        id="fireworks",
        name="Fireworks AI",
        base_url="https://api.fireworks.ai/inference/v1",
        default_model="accounts/fireworks/models/llama-v3p3-70b-instruct",
        dashboard_url="https://fireworks.ai/account/api-keys",
    ),
    "mistral": ProviderConfig(
        id="mistral",
        name="Mistral AI",
        base_url="https://api.mistral.ai/v1",
        default_model="mistral-small-latest",
        dashboard_url="https://console.mistral.ai/api-keys",
    ),
    "openai": ProviderConfig(
        id="openai",
        name="OpenAI",
        base_url="https://api.openai.com/v1",
        default_model="gpt-4.1-mini",
        dashboard_url="https://platform.openai.com/api-keys",
    ),
    "together": ProviderConfig(
        id="together",
        name="Together AI",
        base_url="https://api.together.xyz/v1",
        default_model="meta-llama/Llama-3.3-70B-Instruct-Turbo",
        dashboard_url="https://api.together.xyz/settings/api-keys",
    ),
    "xai": ProviderConfig(
        id="xai",
        name="xAI (Grok)",
        base_url="https://api.x.ai/v1",
        default_model="grok-3-mini",
        dashboard_url="https://console.x.ai/",
    ),
}
