import os
from dataclasses import dataclass
from functools import lru_cache


class ConfigurationError(ValueError):
    pass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None and value.strip() else default


def _get_env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


def _get_env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class Settings:
    crpt_base_url: str
    crpt_create_path: str
    signature: str
    connect_timeout_s: float
    read_timeout_s: float
    rl_capacity: int
    rl_cooldown_s: float
    rl_acquire_timeout_s: float

    @property
    def create_document_url(self) -> str:
        return f"{self.crpt_base_url.rstrip('/')}/{self.crpt_create_path.lstrip('/')}"


@lru_cache
def get_settings() -> Settings:
    return Settings(
        crpt_base_url=_get_env("CRPT_BASE_URL", "https://ismp.crpt.ru/api/v3"),
        crpt_create_path=_get_env("CRPT_CREATE_PATH", "/lk/documents/create"),
        signature=_get_env("CRPT_SIGNATURE", ""),
        connect_timeout_s=_get_env_float("HTTP_CONNECT_TIMEOUT_S", 5.0),
        read_timeout_s=_get_env_float("HTTP_READ_TIMEOUT_S", 10.0),
        rl_capacity=_get_env_int("CRPT_RL_CAPACITY", 2),
        rl_cooldown_s=_get_env_float("CRPT_RL_COOLDOWN_S", 5.0),
        rl_acquire_timeout_s=_get_env_float("CRPT_RL_ACQUIRE_TIMEOUT_S", 0.0),
    )
