"""
Simulation de démonstration.

Une simulation construit une flotte de trois machines, génère un lot
d'events Sale/Refill aléatoires et les publie un par un sur le bus.
Le résultat contient les events publiés et l'état final des machines.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from vending import config
from vending.domain import events, model
from vending.service_layer import bootstrap
from vending.views import views

logger = logging.getLogger(__name__)

SEED_FLEET: tuple[tuple[str, int], ...] = (
    ("001", 3),
    ("002", 5),
    ("003", 1),
)
MACHINE_IDS = tuple(machine_id for machine_id, _ in SEED_FLEET)
SALE_QUANTITIES = (1, 2)
REFILL_QUANTITIES = (3, 5)


@dataclass
class SimulationResult:
    published: list[events.AnyEvent] = field(default_factory=list)
    machines: list[dict] = field(default_factory=list)


def random_machine_id(rng: random.Random) -> str:
    return rng.choice(MACHINE_IDS)


def generate_event(rng: random.Random) -> events.AnyEvent:
    """Une chance sur deux : vente de 1 ou 2, sinon réapprovisionnement de 3 ou 5."""
    if rng.random() < 0.5:
        return events.Sale(
            machine_id=random_machine_id(rng), quantity=rng.choice(SALE_QUANTITIES)
        )
    return events.Refill(
        machine_id=random_machine_id(rng), quantity=rng.choice(REFILL_QUANTITIES)
    )


def seed_fleet(app: bootstrap.Application) -> None:
    for machine_id, stock_level in SEED_FLEET:
        app.machines.add(model.Machine(id=machine_id, stock_level=stock_level))


def run_simulation(
    event_count: int | None = None,
    rng: random.Random | None = None,
    app: bootstrap.Application | None = None,
) -> SimulationResult:
    """
    Exécute une simulation complète et renvoie l'état final.

    Sans `app`, une application neuve est construite avec la flotte
    initiale ; sinon l'application fournie est utilisée telle quelle.

    Les écritures du repository sont validées en fin de simulation. Une
    application construite ici est fermée avant de rendre la main, même
    en cas d'erreur ; une application fournie reste ouverte.
    """
    if event_count is None:
        event_count = config.get_simulation_event_count()
    if rng is None:
        rng = random.Random()
    owns_app = app is None
    if app is None:
        app = bootstrap.bootstrap()

    try:
        if owns_app:
            seed_fleet(app)
        logger.info("Niveaux de stock initiaux : %s", views.machines(app.machines))

        result = SimulationResult()
        for event in (generate_event(rng) for _ in range(event_count)):
            logger.info(
                "Event généré de type '%s' pour la machine '%s'",
                event.kind.value, event.machine_id,
            )
            app.bus.publish(event)
            result.published.append(event)

        result.machines = views.machines(app.machines)
        app.machines.commit()
        logger.info("Niveaux de stock finaux : %s", result.machines)
        return result
    finally:
        if owns_app:
            app.close()
