"""
Subscribers du domaine.

Chaque subscriber consomme un seul kind d'event, lit et modifie la
machine concernée via le repository partagé, et publie au besoin un
event dérivé :

- une vente qui fait passer le stock sous le seuil -> LowStockWarning
- un réapprovisionnement qui ramène une machine en alerte au seuil -> StockLevelOk

Un event visant une machine inconnue est abandonné : un diagnostic est
émis, rien n'est modifié et aucune erreur ne remonte à l'éditeur.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vending.adapters.diagnostics import Diagnostic
from vending.domain import events, model
from vending.service_layer.messagebus import AbstractSubscriber

if TYPE_CHECKING:
    from vending.adapters.diagnostics import AbstractDiagnostics
    from vending.adapters.repository import AbstractRepository
    from vending.domain.maybe import Maybe
    from vending.service_layer.messagebus import MessageBus

logger = logging.getLogger(__name__)


class MachineSubscriber(AbstractSubscriber):
    """Base commune : accès au repository, au bus et au seuil de stock bas."""

    def __init__(
        self,
        machines: AbstractRepository[model.Machine],
        bus: MessageBus,
        diagnostics: AbstractDiagnostics,
        threshold: int = model.DEFAULT_LOW_STOCK_THRESHOLD,
    ):
        self.machines = machines
        self.bus = bus
        self.diagnostics = diagnostics
        self.threshold = threshold

    def _find(self, event: events.AnyEvent) -> Maybe[model.Machine]:
        found = self.machines.get_by_id(event.machine_id)
        if not found:
            self.diagnostics.notice(
                Diagnostic.ENTITY_NOT_FOUND,
                f"Aucune machine '{event.machine_id}' pour l'event {event.kind.value}",
            )
        return found


class MachineSaleSubscriber(MachineSubscriber):
    def handle(self, event: events.Sale) -> None:
        """
        Décrémente le stock de la quantité vendue.

        Pas de plancher à zéro : une survente donne un stock négatif.
        Une seule alerte active par machine : si l'alerte est déjà levée,
        aucun LowStockWarning n'est republié.
        """
        found = self._find(event)
        if not found:
            return
        machine = found.unwrap()
        machine.stock_level -= event.quantity
        self.machines.update(machine)
        logger.info(
            "Vente de %d sur la machine %s, stock : %d",
            event.quantity, machine.id, machine.stock_level,
        )
        if machine.is_below(self.threshold) and not machine.has_low_stock_warning:
            self.bus.publish(events.LowStockWarning(machine_id=machine.id))


class MachineRefillSubscriber(MachineSubscriber):
    def handle(self, event: events.Refill) -> None:
        """
        Incrémente le stock ; lève l'alerte si le seuil est de nouveau atteint.

        StockLevelOk n'est publié que si une alerte était active.
        """
        found = self._find(event)
        if not found:
            return
        machine = found.unwrap()
        machine.stock_level += event.quantity
        self.machines.update(machine)
        logger.info(
            "Réapprovisionnement de %d sur la machine %s, stock : %d",
            event.quantity, machine.id, machine.stock_level,
        )
        if not machine.is_below(self.threshold) and machine.has_low_stock_warning:
            machine.has_low_stock_warning = False
            self.machines.update(machine)
            self.bus.publish(events.StockLevelOk(machine_id=machine.id))


class StockWarningSubscriber(MachineSubscriber):
    def handle(self, event: events.LowStockWarning) -> None:
        """Lève l'alerte de stock bas (idempotent)."""
        found = self._find(event)
        if not found:
            return
        machine = found.unwrap()
        if not machine.has_low_stock_warning:
            logger.info("Alerte de stock bas pour la machine %s", machine.id)
        machine.has_low_stock_warning = True
        self.machines.update(machine)


class StockLevelOkSubscriber(MachineSubscriber):
    def handle(self, event: events.StockLevelOk) -> None:
        """Retire l'alerte de stock bas (idempotent)."""
        found = self._find(event)
        if not found:
            return
        machine = found.unwrap()
        logger.info("Stock de nouveau suffisant pour la machine %s", machine.id)
        machine.has_low_stock_warning = False
        self.machines.update(machine)
