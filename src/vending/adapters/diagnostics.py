"""
Adapter pour les diagnostics.

Le bus et les subscribers ne remontent aucune erreur à l'appelant :
les situations notables (machine inconnue, event sans subscriber,
handler en échec...) sont signalées sur ce canal, injecté à la
construction. En production il écrit dans `logging` ; en test on
injecte un fake qui enregistre les notices.
"""

from __future__ import annotations

import abc
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Diagnostic(str, Enum):
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
    NO_SUBSCRIBERS = "no_subscribers"
    ENTITY_NOT_FOUND = "entity_not_found"
    HANDLER_FAULT = "handler_fault"


class AbstractDiagnostics(abc.ABC):
    """Interface abstraite du canal de diagnostic."""

    @abc.abstractmethod
    def notice(self, kind: Diagnostic, message: str) -> None:
        raise NotImplementedError


class LoggingDiagnostics(AbstractDiagnostics):
    """Implémentation concrète écrivant les notices dans un logger."""

    LEVELS = {
        Diagnostic.SUBSCRIBED: logging.DEBUG,
        Diagnostic.UNSUBSCRIBED: logging.DEBUG,
        Diagnostic.NO_SUBSCRIBERS: logging.INFO,
        Diagnostic.ENTITY_NOT_FOUND: logging.WARNING,
        Diagnostic.HANDLER_FAULT: logging.ERROR,
    }

    def __init__(self, target: logging.Logger | None = None):
        self.target = target or logger

    def notice(self, kind: Diagnostic, message: str) -> None:
        self.target.log(self.LEVELS[kind], "[%s] %s", kind.value, message)
