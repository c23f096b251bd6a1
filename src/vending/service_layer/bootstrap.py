"""
Bootstrap : assemblage de l'application (Composition Root).

Ce module construit le bus, le repository de machines et les
subscribers, puis inscrit chaque subscriber sur son kind d'event.

C'est le seul endroit de l'application qui connaît les
implémentations concrètes de chaque abstraction. En test, on injecte
un repository et des diagnostics factices via les paramètres.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from vending import config
from vending.adapters import diagnostics as diagnostics_adapter
from vending.adapters import orm, repository
from vending.domain import events, model
from vending.service_layer import handlers, messagebus


@dataclass
class Application:
    """Le bus câblé et le repository qu'il partage avec les subscribers."""

    bus: messagebus.MessageBus
    machines: repository.AbstractRepository[model.Machine]
    diagnostics: diagnostics_adapter.AbstractDiagnostics

    def close(self) -> None:
        self.machines.close()


def bootstrap(
    machines: repository.AbstractRepository[model.Machine] | None = None,
    diagnostics: diagnostics_adapter.AbstractDiagnostics | None = None,
    threshold: int | None = None,
    isolate_faults: bool | None = None,
) -> Application:
    """
    Construit et retourne une Application configurée.

    Les paramètres laissés à None sont résolus depuis la configuration.
    """
    if machines is None:
        machines = build_machine_repository()

    if diagnostics is None:
        diagnostics = diagnostics_adapter.LoggingDiagnostics()

    if threshold is None:
        threshold = config.get_low_stock_threshold()

    if isolate_faults is None:
        isolate_faults = config.get_isolate_handler_faults()

    bus = messagebus.MessageBus(diagnostics=diagnostics, isolate_faults=isolate_faults)
    for kind, subscriber_classes in SUBSCRIBERS.items():
        for subscriber_class in subscriber_classes:
            bus.subscribe(
                kind,
                subscriber_class(
                    machines=machines,
                    bus=bus,
                    diagnostics=diagnostics,
                    threshold=threshold,
                ),
            )

    return Application(bus=bus, machines=machines, diagnostics=diagnostics)


def build_machine_repository() -> repository.AbstractRepository[model.Machine]:
    """Repository choisi par VENDING_REPOSITORY (mémoire par défaut)."""
    if config.get_repository_backend() == "sqlalchemy":
        orm.start_mappers()
        engine = create_engine(config.get_database_uri())
        orm.metadata.create_all(engine)
        return repository.SqlAlchemyRepository(sessionmaker(bind=engine)(), engine=engine)
    return repository.InMemoryRepository()


# --- Routage des events vers les subscribers ---

SUBSCRIBERS: dict[events.EventKind, list[type[handlers.MachineSubscriber]]] = {
    events.EventKind.SALE: [handlers.MachineSaleSubscriber],
    events.EventKind.REFILL: [handlers.MachineRefillSubscriber],
    events.EventKind.LOW_STOCK_WARNING: [handlers.StockWarningSubscriber],
    events.EventKind.STOCK_LEVEL_OK: [handlers.StockLevelOkSubscriber],
}
