"""
Type option.

Le repository renvoie un Maybe plutôt que None : l'absence d'une entité
est portée par le type du résultat, l'appelant doit la traiter
explicitement avant d'accéder à la valeur.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


class Maybe(Generic[T]):
    """Soit une valeur présente, soit rien."""

    __slots__ = ("_value", "_present")

    def __init__(self, value: T | None, present: bool):
        self._value = value
        self._present = present

    @classmethod
    def some(cls, value: T) -> Maybe[T]:
        return cls(value, True)

    @classmethod
    def nothing(cls) -> Maybe[T]:
        return cls(None, False)

    @classmethod
    def of(cls, value: T | None) -> Maybe[T]:
        """Construit un Maybe vide si `value` est None."""
        if value is None:
            return cls.nothing()
        return cls.some(value)

    def __repr__(self) -> str:
        if self._present:
            return f"Maybe.some({self._value!r})"
        return "Maybe.nothing()"

    def __bool__(self) -> bool:
        return self._present

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Maybe):
            return NotImplemented
        return self._present == other._present and self._value == other._value

    __hash__ = None  # type: ignore[assignment]

    def is_present(self) -> bool:
        return self._present

    def is_empty(self) -> bool:
        return not self._present

    def map(self, transform: Callable[[T], U]) -> Maybe[U]:
        if self._present:
            return Maybe.some(transform(self._value))  # type: ignore[arg-type]
        return Maybe.nothing()

    def flat_map(self, transform: Callable[[T], Maybe[U]]) -> Maybe[U]:
        if self._present:
            return transform(self._value)  # type: ignore[arg-type]
        return Maybe.nothing()

    def get_or_else(self, default: U) -> Union[T, U]:
        if self._present:
            return self._value  # type: ignore[return-value]
        return default

    def unwrap(self) -> T:
        """Renvoie la valeur ; lève ValueError si le Maybe est vide."""
        if not self._present:
            raise ValueError("Maybe vide : aucune valeur à extraire")
        return self._value  # type: ignore[return-value]
