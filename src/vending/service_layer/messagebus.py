"""
Message Bus.

Le bus est le point central de publication des events vers leurs
subscribers. Il tient, pour chaque EventKind, la liste ordonnée des
subscribers inscrits (ordre d'inscription = ordre de livraison).

Fonctionnement :
1. Un event est publié sur le bus
2. Le bus retrouve les subscribers inscrits pour son `kind`
3. Chaque subscriber est appelé de façon synchrone, dans l'ordre
4. Un subscriber peut lui-même publier un event dérivé : cette
   publication imbriquée se termine entièrement avant que le
   subscriber appelant ne reprenne la main

Il n'y a ni queue ni batching : une publication est un simple arbre
d'appels. La profondeur attendue est de 2 (event initial, puis event
dérivé) ; au-delà de `max_depth` le bus lève DispatchDepthExceeded.

Par défaut, l'échec d'un subscriber remonte à l'appelant et interrompt
la suite de la publication. Avec `isolate_faults=True`, l'erreur est
loggée et les autres subscribers continuent.
"""

from __future__ import annotations

import abc
import logging
from typing import Union

from vending.adapters.diagnostics import AbstractDiagnostics, Diagnostic, LoggingDiagnostics
from vending.domain import events

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 8


class DispatchDepthExceeded(Exception):
    """Levée quand des publications imbriquées dépassent la profondeur autorisée."""
    pass


class AbstractSubscriber(abc.ABC):
    """Un subscriber reçoit chaque event publié pour le kind auquel il est inscrit."""

    @abc.abstractmethod
    def handle(self, event: events.AnyEvent) -> None:
        raise NotImplementedError


class MessageBus:
    """
    Bus publish/subscribe synchrone.

    Le registre des subscribers appartient à l'instance : chaque bus est
    construit explicitement (voir bootstrap), il n'y a pas de bus global.
    """

    def __init__(
        self,
        diagnostics: AbstractDiagnostics | None = None,
        isolate_faults: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.diagnostics = diagnostics or LoggingDiagnostics(logger)
        self.isolate_faults = isolate_faults
        self.max_depth = max_depth
        self.subscribers: dict[events.EventKind, list[AbstractSubscriber]] = {}
        self._depth = 0

    def subscribe(
        self, kind: Union[events.EventKind, str], subscriber: AbstractSubscriber
    ) -> None:
        """
        Inscrit un subscriber pour toutes les publications futures de `kind`.

        Une double inscription n'est pas filtrée : le subscriber sera
        alors appelé deux fois par event.
        """
        kind = events.EventKind(kind)
        self.subscribers.setdefault(kind, []).append(subscriber)
        self.diagnostics.notice(
            Diagnostic.SUBSCRIBED, f"Subscriber ajouté pour le type '{kind.value}'"
        )

    def unsubscribe(
        self, kind: Union[events.EventKind, str], subscriber: AbstractSubscriber
    ) -> None:
        """Retire la première inscription de ce subscriber (comparaison par identité)."""
        kind = events.EventKind(kind)
        registered = self.subscribers.get(kind, [])
        for index, candidate in enumerate(registered):
            if candidate is subscriber:
                del registered[index]
                self.diagnostics.notice(
                    Diagnostic.UNSUBSCRIBED,
                    f"Subscriber retiré pour le type '{kind.value}'",
                )
                return

    def subscribers_for(
        self, kind: Union[events.EventKind, str]
    ) -> tuple[AbstractSubscriber, ...]:
        return tuple(self.subscribers.get(events.EventKind(kind), []))

    def publish(self, event: events.AnyEvent) -> None:
        """
        Livre l'event à tous les subscribers de son kind.

        La liste est copiée au moment de la publication : une
        (dés)inscription faite pendant la livraison ne concerne que les
        publications suivantes.
        """
        registered = self.subscribers_for(event.kind)
        if not registered:
            self.diagnostics.notice(
                Diagnostic.NO_SUBSCRIBERS,
                f"Aucun subscriber pour le type '{event.kind.value}'",
            )
            return

        if self._depth >= self.max_depth:
            raise DispatchDepthExceeded(
                f"Profondeur de publication {self._depth} atteinte pour {event}"
            )
        self._depth += 1
        try:
            for subscriber in registered:
                self._deliver(subscriber, event)
        finally:
            self._depth -= 1

    def _deliver(self, subscriber: AbstractSubscriber, event: events.AnyEvent) -> None:
        logger.debug("Traitement de l'event %s avec %s", event, subscriber)
        if not self.isolate_faults:
            subscriber.handle(event)
            return
        try:
            subscriber.handle(event)
        except DispatchDepthExceeded:
            raise
        except Exception:
            logger.exception("Erreur lors du traitement de l'event %s", event)
            self.diagnostics.notice(
                Diagnostic.HANDLER_FAULT,
                f"{type(subscriber).__name__} a échoué sur {event}",
            )
