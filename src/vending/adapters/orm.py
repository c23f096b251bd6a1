"""
Mapping ORM avec SQLAlchemy (classical mapping).

La table est définie séparément, puis la classe Machine du domaine est
mappée dessus : le modèle reste ignorant de la persistance.

Une clé technique auto-incrémentée (`pk`) conserve l'ordre d'insertion
et autorise plusieurs lignes avec le même identifiant de machine.
"""

import threading

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table
from sqlalchemy.orm import registry

from vending.domain import model

metadata = MetaData()
mapper_registry = registry(metadata=metadata)

machines = Table(
    "machines",
    metadata,
    Column("pk", Integer, primary_key=True, autoincrement=True),
    Column("id", String(255), nullable=False, index=True),
    Column("stock_level", Integer, nullable=False),
    Column("has_low_stock_warning", Boolean, nullable=False, default=False),
)

_started = False
_lock = threading.Lock()


def start_mappers() -> None:
    """
    Configure le mapping entre Machine et la table `machines`.

    Un mapper ne peut être déclaré qu'une fois par classe : les appels
    suivants sont sans effet, y compris depuis des threads concurrents.
    """
    global _started
    with _lock:
        if _started:
            return
        mapper_registry.map_imperatively(model.Machine, machines)
        _started = True
