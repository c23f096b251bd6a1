"""
Events du domaine.

Les events représentent des faits qui se sont produits sur une machine.
Ils sont immuables et portent tous l'identifiant de la machine concernée.

Chaque variante expose un `kind` (tag fixe) qui sert de clé de routage
dans le bus : l'ensemble des variantes est fermé (voir `AnyEvent`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class EventKind(str, Enum):
    """Tags fixes identifiant chaque variante d'event."""

    SALE = "sale"
    REFILL = "refill"
    LOW_STOCK_WARNING = "lowStockWarning"
    STOCK_LEVEL_OK = "stockLevelOk"


class Event:
    """Classe de base pour tous les events du domaine."""

    kind: ClassVar[EventKind]
    machine_id: str


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValueError(f"La quantité doit être un entier positif : {quantity!r}")


@dataclass(frozen=True)
class Sale(Event):
    """Des articles ont été vendus par une machine."""

    machine_id: str
    quantity: int

    kind: ClassVar[EventKind] = EventKind.SALE

    def __post_init__(self) -> None:
        _check_quantity(self.quantity)


@dataclass(frozen=True)
class Refill(Event):
    """Une machine a été réapprovisionnée."""

    machine_id: str
    quantity: int

    kind: ClassVar[EventKind] = EventKind.REFILL

    def __post_init__(self) -> None:
        _check_quantity(self.quantity)


@dataclass(frozen=True)
class LowStockWarning(Event):
    """Le stock d'une machine vient de passer sous le seuil."""

    machine_id: str

    kind: ClassVar[EventKind] = EventKind.LOW_STOCK_WARNING


@dataclass(frozen=True)
class StockLevelOk(Event):
    """Le stock d'une machine en alerte est revenu au seuil ou au-dessus."""

    machine_id: str

    kind: ClassVar[EventKind] = EventKind.STOCK_LEVEL_OK


AnyEvent = Union[Sale, Refill, LowStockWarning, StockLevelOk]
