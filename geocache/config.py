"""Tunable constants of a game, held in a validated mapping."""

from __future__ import annotations

import math
from collections.abc import Callable, MutableMapping
from numbers import Integral, Real
from typing import TYPE_CHECKING, Any, ClassVar

from geocache.errors import ConfigurationError

if TYPE_CHECKING:
    from geocache.game import GameState

# Location of the Oakes College classroom at UC Santa Cruz
DEFAULT_ORIGIN = (36.98949379578401, -122.06277128548504)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _positive_finite(value: Any) -> str | None:
    if not (_is_number(value) and math.isfinite(value) and value > 0):
        return "must be a positive finite number"
    return None


def _non_negative_int(value: Any) -> str | None:
    if not (isinstance(value, Integral) and not isinstance(value, bool) and value >= 0):
        return "must be an integer >= 0"
    return None


def _positive_int(value: Any) -> str | None:
    if not (isinstance(value, Integral) and not isinstance(value, bool) and value > 0):
        return "must be an integer > 0"
    return None


def _probability(value: Any) -> str | None:
    if not (_is_number(value) and 0 <= value <= 1):
        return "must be a number in [0, 1]"
    return None


def _finite(value: Any) -> str | None:
    if not (_is_number(value) and math.isfinite(value)):
        return "must be a finite number"
    return None


def _lat_lng(value: Any) -> str | None:
    try:
        lat, lng = value
    except (TypeError, ValueError):
        return "must be a (lat, lng) pair"
    if _finite(lat) or _finite(lng):
        return "must be a pair of finite numbers"
    return None


class GameConfig(MutableMapping):
    """The parameters of a game.

    Attributes:
        game: the GameState this config is bound to, None while unbound

    Notes:
        in essence, this is a mutable mapping with attribute access and
        validation of the known parameters. Unknown keys are accepted as
        free-form extra parameters. Once bound to a GameState the config can
        no longer be changed.

    """

    defaults: ClassVar[dict[str, Any]] = {
        "scale_factor": 1e4,
        "neighborhood_radius": 8,
        "spawn_probability": 0.1,
        "movement_delta": 0.01,
        "origin": DEFAULT_ORIGIN,
        "initial_value_scale": 100,
    }

    validators: ClassVar[dict[str, Callable[[Any], str | None]]] = {
        "scale_factor": _positive_finite,
        "neighborhood_radius": _non_negative_int,
        "spawn_probability": _probability,
        "movement_delta": _finite,
        "origin": _lat_lng,
        "initial_value_scale": _positive_int,
    }

    __slots__ = ("__dict__", "game")

    def __init__(self, **kwargs):
        """Initialize a GameConfig.

        Args:
            kwargs: parameter values overriding the defaults

        Raises:
            ConfigurationError: if a known parameter has an invalid value
        """
        self.game: GameState | None = None
        for key, value in {**self.defaults, **kwargs}.items():
            self[key] = value

    def __setitem__(self, key, value):  # noqa: D105
        if self.game is not None:
            raise ConfigurationError(key, "cannot be changed once bound to a game")

        validator = self.validators.get(key)
        if validator is not None:
            reason = validator(value)
            if reason is not None:
                raise ConfigurationError(key, f"{reason}, got {value!r}")
            if key == "origin":
                value = tuple(float(v) for v in value)

        self.__dict__[key] = value

    def __getitem__(self, key):  # noqa: D105
        return self.__dict__[key]

    def __delitem__(self, key):  # noqa: D105
        if key in self.defaults:
            raise ConfigurationError(key, "is required and cannot be removed")
        if self.game is not None:
            raise ConfigurationError(key, "cannot be changed once bound to a game")
        del self.__dict__[key]

    def __iter__(self):  # noqa: D105
        return iter(self.__dict__)

    def __len__(self):  # noqa: D105
        return len(self.__dict__)

    def __setattr__(self, key, value):  # noqa: D105
        if key not in self.__slots__:
            self.__setitem__(key, value)
        else:
            super().__setattr__(key, value)

    def __delattr__(self, key):  # noqa: D105
        if key not in self.__slots__:
            self.__delitem__(key)
        else:
            super().__delattr__(key)

    def to_dict(self) -> dict[str, Any]:
        """Return a dict representation of the config."""
        return self.__dict__.copy()
