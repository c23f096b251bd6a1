"""
Views (lecture).

Fonctions de lecture pure qui transforment l'état du repository en
structures simples (dicts), prêtes à être loggées ou sérialisées.
"""

from __future__ import annotations

from vending.adapters.repository import AbstractRepository
from vending.domain import model


def machines(repository: AbstractRepository[model.Machine]) -> list[dict]:
    """Listing des machines dans l'ordre d'insertion."""
    return [
        {
            "id": machine.id,
            "stock_level": machine.stock_level,
            "has_low_stock_warning": machine.has_low_stock_warning,
            "state": machine.state.value,
        }
        for machine in repository.get_all()
    ]
