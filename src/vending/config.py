"""
Configuration.

Chaque réglage est lu dans l'environnement au moment de l'appel, avec
une valeur par défaut. Une valeur invalide lève ValueError.
"""

from __future__ import annotations

import os

REPOSITORY_BACKENDS = ("memory", "sqlalchemy")


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} doit être un entier : {raw!r}") from None


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} doit être un booléen : {raw!r}")


def get_low_stock_threshold() -> int:
    return _int_from_env("VENDING_LOW_STOCK_THRESHOLD", 3)


def get_simulation_event_count() -> int:
    count = _int_from_env("VENDING_SIMULATION_EVENTS", 5)
    if count < 0:
        raise ValueError(f"VENDING_SIMULATION_EVENTS doit être positif ou nul : {count}")
    return count


def get_repository_backend() -> str:
    backend = os.environ.get("VENDING_REPOSITORY", "memory").strip().lower()
    if backend not in REPOSITORY_BACKENDS:
        raise ValueError(
            f"VENDING_REPOSITORY inconnu : {backend!r} (attendu : {', '.join(REPOSITORY_BACKENDS)})"
        )
    return backend


def get_database_uri() -> str:
    # SQLite en mémoire : rien ne survit d'une simulation à l'autre.
    return os.environ.get("VENDING_DATABASE_URI", "sqlite://")


def get_isolate_handler_faults() -> bool:
    return _bool_from_env("VENDING_ISOLATE_HANDLER_FAULTS", False)


def get_api_host() -> str:
    return os.environ.get("VENDING_API_HOST", "0.0.0.0")


def get_api_port() -> int:
    return _int_from_env("VENDING_API_PORT", 4000)
