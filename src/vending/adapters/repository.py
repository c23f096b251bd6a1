"""
Pattern Repository.

Le repository détient l'exemplaire canonique de chaque entité, indexé
par son `id`. Il expose une interface de type collection
(add, get_by_id, update, remove, get_all) qui masque les détails du
stockage.

La recherche renvoie un Maybe : l'absence d'une entité n'est jamais
représentée par un None que l'appelant oublierait de tester.
"""

from __future__ import annotations

import abc
from typing import Generic, Protocol, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from vending.adapters import orm
from vending.domain import model
from vending.domain.maybe import Maybe


class Entity(Protocol):
    id: str


T = TypeVar("T", bound=Entity)


class AbstractRepository(abc.ABC, Generic[T]):
    """
    Interface abstraite du repository.

    Les méthodes publiques fixent le contrat (Maybe pour la recherche,
    snapshot immuable pour le listing) puis délèguent aux méthodes
    abstraites préfixées _ que les sous-classes implémentent.
    """

    def add(self, entity: T) -> None:
        """Ajoute une entité ; aucun contrôle d'unicité sur l'id."""
        self._add(entity)

    def get_by_id(self, id: str) -> Maybe[T]:
        """Première entité ayant cet id, ou Maybe.nothing()."""
        return Maybe.of(self._get_by_id(id))

    def update(self, entity: T) -> None:
        """Remplace la première entité de même id ; sans effet si aucune."""
        self._update(entity)

    def remove(self, id: str) -> None:
        """Supprime toutes les entités ayant cet id."""
        self._remove(id)

    def get_all(self) -> tuple[T, ...]:
        """Snapshot en lecture seule, dans l'ordre d'insertion."""
        return tuple(self._get_all())

    def commit(self) -> None:
        """Valide les écritures en cours ; sans effet pour un stockage en mémoire."""

    def close(self) -> None:
        """Libère les ressources du stockage ; sans effet pour un stockage en mémoire."""

    @abc.abstractmethod
    def _add(self, entity: T) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _get_by_id(self, id: str) -> T | None:
        raise NotImplementedError

    @abc.abstractmethod
    def _update(self, entity: T) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _remove(self, id: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _get_all(self) -> list[T]:
        raise NotImplementedError


class InMemoryRepository(AbstractRepository[T]):
    """Repository générique en mémoire, adossé à une liste."""

    def __init__(self, entities: list[T] | None = None):
        self._entities: list[T] = list(entities or [])

    def _add(self, entity: T) -> None:
        self._entities.append(entity)

    def _get_by_id(self, id: str) -> T | None:
        return next((e for e in self._entities if e.id == id), None)

    def _update(self, entity: T) -> None:
        for index, existing in enumerate(self._entities):
            if existing.id == entity.id:
                self._entities[index] = entity
                return

    def _remove(self, id: str) -> None:
        self._entities = [e for e in self._entities if e.id != id]

    def _get_all(self) -> list[T]:
        return list(self._entities)


class SqlAlchemyRepository(AbstractRepository[model.Machine]):
    """
    Implémentation concrète du repository de machines avec SQLAlchemy.

    Nécessite que `orm.start_mappers()` ait été appelé. Chaque écriture
    est flushée pour que les lectures suivantes de la même session la
    voient.

    Si un `engine` est fourni, le repository en est propriétaire :
    `close()` ferme la session puis libère l'engine.
    """

    def __init__(self, session: Session, engine: Engine | None = None):
        self.session = session
        self.engine = engine

    def commit(self) -> None:
        self.session.commit()

    def close(self) -> None:
        self.session.close()
        if self.engine is not None:
            self.engine.dispose()

    def _query(self, id: str | None = None):
        query = self.session.query(model.Machine)
        if id is not None:
            query = query.filter(orm.machines.c.id == id)
        return query.order_by(orm.machines.c.pk)

    def _add(self, machine: model.Machine) -> None:
        self.session.add(machine)
        self.session.flush()

    def _get_by_id(self, id: str) -> model.Machine | None:
        return self._query(id).first()

    def _update(self, machine: model.Machine) -> None:
        existing = self._get_by_id(machine.id)
        if existing is None:
            return
        if existing is not machine:
            # La session ne garde qu'une instance par ligne : on recopie l'état.
            existing.stock_level = machine.stock_level
            existing.has_low_stock_warning = machine.has_low_stock_warning
        self.session.flush()

    def _remove(self, id: str) -> None:
        for machine in self._query(id).all():
            self.session.delete(machine)
        self.session.flush()

    def _get_all(self) -> list[model.Machine]:
        return self._query().all()
