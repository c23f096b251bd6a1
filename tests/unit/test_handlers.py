"""
Tests des subscribers du domaine via le bus.

On câble l'application avec bootstrap, un repository en mémoire et des
diagnostics factices ; des collecteurs inscrits sur les kinds dérivés
permettent de vérifier quels events ont été publiés.
"""

from __future__ import annotations

import pytest

from vending.adapters.diagnostics import AbstractDiagnostics, Diagnostic
from vending.adapters.repository import InMemoryRepository
from vending.domain import events
from vending.domain.model import Machine, StockState
from vending.service_layer import bootstrap, handlers


# --- Fakes pour les tests ---


class FakeDiagnostics(AbstractDiagnostics):
    """Capture les notices émises pour vérification dans les tests."""

    def __init__(self) -> None:
        self.notices: list[tuple[Diagnostic, str]] = []

    def notice(self, kind: Diagnostic, message: str) -> None:
        self.notices.append((kind, message))

    def of_kind(self, kind: Diagnostic) -> list[str]:
        return [message for k, message in self.notices if k == kind]


class Collector:
    """Subscriber qui se contente de mémoriser les events reçus."""

    def __init__(self) -> None:
        self.reçus: list[events.Event] = []

    def handle(self, event: events.Event) -> None:
        self.reçus.append(event)


def bootstrap_test_app(*machines: Machine, threshold: int = 3) -> bootstrap.Application:
    return bootstrap.bootstrap(
        machines=InMemoryRepository(list(machines)),
        diagnostics=FakeDiagnostics(),
        threshold=threshold,
        isolate_faults=False,
    )


def collect(app: bootstrap.Application, kind: events.EventKind) -> Collector:
    collector = Collector()
    app.bus.subscribe(kind, collector)
    return collector


# --- Vente ---


class TestVente:
    def test_vente_sous_le_seuil_lève_une_alerte(self):
        app = bootstrap_test_app(Machine("001", stock_level=3))
        alertes = collect(app, events.EventKind.LOW_STOCK_WARNING)

        app.bus.publish(events.Sale(machine_id="001", quantity=1))

        machine = app.machines.get_by_id("001").unwrap()
        assert machine.stock_level == 2
        assert machine.has_low_stock_warning is True
        assert machine.state == StockState.LOW_STOCK
        assert alertes.reçus == [events.LowStockWarning(machine_id="001")]

    def test_une_seule_alerte_tant_qu_elle_est_active(self):
        app = bootstrap_test_app(Machine("001", stock_level=3))
        alertes = collect(app, events.EventKind.LOW_STOCK_WARNING)

        app.bus.publish(events.Sale(machine_id="001", quantity=1))
        app.bus.publish(events.Sale(machine_id="001", quantity=1))

        assert len(alertes.reçus) == 1
        assert app.machines.get_by_id("001").unwrap().stock_level == 1

    def test_vente_au_dessus_du_seuil_ne_publie_rien(self):
        app = bootstrap_test_app(Machine("002", stock_level=5))
        alertes = collect(app, events.EventKind.LOW_STOCK_WARNING)

        app.bus.publish(events.Sale(machine_id="002", quantity=2))

        machine = app.machines.get_by_id("002").unwrap()
        assert machine.stock_level == 3
        assert not machine.has_low_stock_warning
        assert alertes.reçus == []

    def test_survente_donne_un_stock_négatif(self):
        app = bootstrap_test_app(Machine("003", stock_level=1))

        app.bus.publish(events.Sale(machine_id="003", quantity=2))

        assert app.machines.get_by_id("003").unwrap().stock_level == -1

    def test_machine_inconnue_ignorée(self):
        app = bootstrap_test_app(Machine("001", stock_level=3))
        alertes = collect(app, events.EventKind.LOW_STOCK_WARNING)

        app.bus.publish(events.Sale(machine_id="999", quantity=2))

        assert app.machines.get_by_id("001").unwrap().stock_level == 3
        assert alertes.reçus == []
        assert app.diagnostics.of_kind(Diagnostic.ENTITY_NOT_FOUND)


# --- Réapprovisionnement ---


class TestRéapprovisionnement:
    def test_réappro_au_seuil_retire_l_alerte(self):
        app = bootstrap_test_app(
            Machine("001", stock_level=2, has_low_stock_warning=True)
        )
        ok = collect(app, events.EventKind.STOCK_LEVEL_OK)

        app.bus.publish(events.Refill(machine_id="001", quantity=5))

        machine = app.machines.get_by_id("001").unwrap()
        assert machine.stock_level == 7
        assert machine.has_low_stock_warning is False
        assert machine.state == StockState.OK
        assert ok.reçus == [events.StockLevelOk(machine_id="001")]

    def test_réappro_exactement_au_seuil(self):
        app = bootstrap_test_app(
            Machine("001", stock_level=0, has_low_stock_warning=True)
        )
        ok = collect(app, events.EventKind.STOCK_LEVEL_OK)

        app.bus.publish(events.Refill(machine_id="001", quantity=3))

        assert len(ok.reçus) == 1
        assert not app.machines.get_by_id("001").unwrap().has_low_stock_warning

    def test_réappro_insuffisant_garde_l_alerte(self):
        app = bootstrap_test_app(
            Machine("001", stock_level=-4, has_low_stock_warning=True)
        )
        ok = collect(app, events.EventKind.STOCK_LEVEL_OK)

        app.bus.publish(events.Refill(machine_id="001", quantity=5))

        machine = app.machines.get_by_id("001").unwrap()
        assert machine.stock_level == 1
        assert machine.has_low_stock_warning is True
        assert ok.reçus == []

    def test_réappro_sans_alerte_ne_publie_rien(self):
        app = bootstrap_test_app(Machine("002", stock_level=5))
        ok = collect(app, events.EventKind.STOCK_LEVEL_OK)

        app.bus.publish(events.Refill(machine_id="002", quantity=3))

        assert app.machines.get_by_id("002").unwrap().stock_level == 8
        assert ok.reçus == []

    def test_machine_inconnue_ignorée(self):
        app = bootstrap_test_app()

        app.bus.publish(events.Refill(machine_id="999", quantity=3))

        assert app.machines.get_all() == ()
        assert app.diagnostics.of_kind(Diagnostic.ENTITY_NOT_FOUND)


# --- Alerte / retour à la normale ---


class TestAlerteEtRetour:
    def test_alerte_idempotente(self):
        machine = Machine("001", stock_level=1)
        app = bootstrap_test_app(machine)

        app.bus.publish(events.LowStockWarning(machine_id="001"))
        app.bus.publish(events.LowStockWarning(machine_id="001"))

        assert machine.has_low_stock_warning is True
        assert machine.stock_level == 1

    def test_retour_à_la_normale_idempotent(self):
        machine = Machine("001", stock_level=6, has_low_stock_warning=True)
        app = bootstrap_test_app(machine)

        app.bus.publish(events.StockLevelOk(machine_id="001"))
        app.bus.publish(events.StockLevelOk(machine_id="001"))

        assert machine.has_low_stock_warning is False

    @pytest.mark.parametrize(
        "event",
        [
            events.Sale(machine_id="inconnue", quantity=1),
            events.Refill(machine_id="inconnue", quantity=3),
            events.LowStockWarning(machine_id="inconnue"),
            events.StockLevelOk(machine_id="inconnue"),
        ],
    )
    def test_machine_inconnue_ne_modifie_rien(self, event):
        machine = Machine("001", stock_level=3)
        app = bootstrap_test_app(machine)

        app.bus.publish(event)

        assert app.machines.get_all() == (machine,)
        assert machine.stock_level == 3
        assert machine.has_low_stock_warning is False


class TestCycleComplet:
    def test_ok_puis_stock_bas_puis_ok(self):
        app = bootstrap_test_app(Machine("001", stock_level=4))
        alertes = collect(app, events.EventKind.LOW_STOCK_WARNING)
        ok = collect(app, events.EventKind.STOCK_LEVEL_OK)

        app.bus.publish(events.Sale(machine_id="001", quantity=2))
        app.bus.publish(events.Sale(machine_id="001", quantity=1))
        app.bus.publish(events.Refill(machine_id="001", quantity=5))
        app.bus.publish(events.Sale(machine_id="001", quantity=5))

        machine = app.machines.get_by_id("001").unwrap()
        assert machine.stock_level == 1
        assert machine.state == StockState.LOW_STOCK
        assert len(alertes.reçus) == 2
        assert len(ok.reçus) == 1

    def test_l_alerte_est_levée_avant_le_retour_au_subscriber_de_vente(self):
        """La publication dérivée se termine avant la suite de la vente."""
        app = bootstrap_test_app(Machine("001", stock_level=3))
        observés: list[bool] = []

        class Espion:
            def handle(self, event):
                observés.append(app.machines.get_by_id("001").unwrap().has_low_stock_warning)

        app.bus.subscribe(events.EventKind.SALE, Espion())
        app.bus.publish(events.Sale(machine_id="001", quantity=1))

        assert observés == [True]


def test_tous_les_subscribers_sont_inscrits():
    app = bootstrap_test_app()
    for kind, classes in bootstrap.SUBSCRIBERS.items():
        inscrits = app.bus.subscribers_for(kind)
        assert [type(s) for s in inscrits] == classes
    assert isinstance(
        app.bus.subscribers_for("sale")[0], handlers.MachineSaleSubscriber
    )
