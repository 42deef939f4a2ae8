"""Configuration for the detective engine."""

from dataclasses import asdict, dataclass, field
from typing import Optional
import json
import os

from dotenv import load_dotenv


@dataclass
class ProviderConfig:
    """Language model server settings."""
    provider: str = "lemonade"  # lemonade | ollama
    model_name: str = "Qwen2.5-7B-Instruct-GGUF"
    base_url: Optional[str] = None  # provider default when unset
    timeout: float = 60.0  # seconds per completion call

    # Question proposal: low temperature, short answers
    question_temperature: float = 0.2
    question_max_tokens: int = 150

    # Trait extraction: near-deterministic, a few tokens
    trait_temperature: float = 0.1
    trait_max_tokens: int = 100


@dataclass
class LookupConfig:
    """Guess-lookup collaborator settings."""
    enabled: bool = True
    endpoint: str = "https://api.duckduckgo.com/"
    timeout: float = 10.0
    max_workers: int = 4  # concurrent guess validations per turn


@dataclass
class GameConfig:
    """When the orchestrator stops asking and commits to a guess."""
    guess_threshold: float = 0.85  # top guess confidence needed to guess
    min_turns_before_guess: int = 5
    max_turns: int = 40  # guess the best candidate once reached


@dataclass
class Config:
    """Complete configuration."""
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    lookup: LookupConfig = field(default_factory=LookupConfig)
    game: GameConfig = field(default_factory=GameConfig)


def _env_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


def apply_env_overrides(config: Config) -> Config:
    """Override config fields from DETECTIVE_* environment variables."""
    provider = os.environ.get("DETECTIVE_PROVIDER")
    if provider:
        config.provider.provider = provider
    model = os.environ.get("DETECTIVE_MODEL")
    if model:
        config.provider.model_name = model
    base_url = os.environ.get("DETECTIVE_BASE_URL")
    if base_url:
        config.provider.base_url = base_url
    timeout = os.environ.get("DETECTIVE_TIMEOUT")
    if timeout:
        try:
            config.provider.timeout = float(timeout)
        except ValueError:
            raise ValueError(f"DETECTIVE_TIMEOUT must be a number, got {timeout!r}") from None
    lookup_enabled = os.environ.get("DETECTIVE_LOOKUP_ENABLED")
    if lookup_enabled:
        config.lookup.enabled = _env_bool(lookup_enabled)
    return config


def load_config(path: Optional[str] = None, use_env: bool = True, env_file: str = ".env") -> Config:
    """Load configuration from JSON file or return defaults.

    Args:
        path: Optional JSON file with "provider", "lookup" and "game" sections
        use_env: Read env_file and DETECTIVE_* variables after the file
        env_file: dotenv file, relative to the working directory

    Returns:
        Config with file values and environment overrides applied
    """
    config = Config()

    if path is not None:
        with open(path) as f:
            data = json.load(f)

        if "provider" in data:
            config.provider = ProviderConfig(**data["provider"])
        if "lookup" in data:
            config.lookup = LookupConfig(**data["lookup"])
        if "game" in data:
            config.game = GameConfig(**data["game"])

    if use_env:
        load_dotenv(env_file)
        apply_env_overrides(config)

    return config


def save_config(config: Config, path: str) -> None:
    """Save configuration to JSON file."""
    with open(path, "w") as f:
        json.dump(asdict(config), f, indent=2)
