"""
Modèle de domaine de la flotte de distributeurs.

Une Machine est l'entité dont l'état (niveau de stock, alerte de stock bas)
est modifié par les subscribers du bus. Le repository en détient
l'exemplaire canonique ; les subscribers n'en gardent jamais de copie.
"""

from __future__ import annotations

from enum import Enum

DEFAULT_STOCK_LEVEL = 5
DEFAULT_LOW_STOCK_THRESHOLD = 3


class StockState(str, Enum):
    """Vue dérivée de l'état d'une machine."""

    OK = "OK"
    LOW_STOCK = "LOW_STOCK"


class Machine:
    """
    Entité représentant un distributeur.

    L'identité est portée par l'instance elle-même : deux machines avec
    le même `id` restent deux objets distincts (le repository accepte
    les doublons et renvoie toujours le premier).

    `stock_level` n'a pas de plancher : une vente supérieure au stock
    le rend négatif.
    """

    def __init__(
        self,
        id: str,
        stock_level: int = DEFAULT_STOCK_LEVEL,
        has_low_stock_warning: bool = False,
    ):
        self.id = id
        self.stock_level = stock_level
        self.has_low_stock_warning = has_low_stock_warning

    def __repr__(self) -> str:
        return (
            f"<Machine {self.id} stock={self.stock_level}"
            f" alerte={self.has_low_stock_warning}>"
        )

    @property
    def state(self) -> StockState:
        """OK tant qu'aucune alerte de stock bas n'est active."""
        if self.has_low_stock_warning:
            return StockState.LOW_STOCK
        return StockState.OK

    def is_below(self, threshold: int) -> bool:
        return self.stock_level < threshold
