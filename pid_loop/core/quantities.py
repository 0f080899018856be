"""
SI quantities for driving a Controller with physical units.

Each concrete class (Meter, Second, Joule and their products and quotients)
declares its operators with typed overloads, so mypy knows that
`Joule / Meter` is a `JoulePerMeter` and that a `JoulePerMeter` times a
`Meter` is a `Joule`. At runtime every quantity also carries its Dimension,
and adding or comparing quantities of different dimensions raises
DimensionError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Type, TypeVar, Union, overload

Scalar = Union[int, float]

_Q = TypeVar("_Q", bound="Quantity")


class DimensionError(TypeError):
    """Raised when quantities of different dimensions are added or compared."""


@dataclass(frozen=True)
class Dimension:
    """Exponents of the SI base units a quantity is expressed in."""
    length: int = 0
    mass: int = 0
    time: int = 0

    @property
    def is_dimensionless(self) -> bool:
        return self.length == 0 and self.mass == 0 and self.time == 0

    def __mul__(self, other: Dimension) -> Dimension:
        return Dimension(self.length + other.length, self.mass + other.mass, self.time + other.time)

    def __truediv__(self, other: Dimension) -> Dimension:
        return Dimension(self.length - other.length, self.mass - other.mass, self.time - other.time)

    def __str__(self) -> str:
        parts = []
        for symbol, exponent in (("kg", self.mass), ("m", self.length), ("s", self.time)):
            if exponent == 1:
                parts.append(symbol)
            elif exponent:
                parts.append(f"{symbol}^{exponent}")
        return "*".join(parts) or "1"


DIMENSIONLESS = Dimension()
LENGTH = Dimension(length=1)
TIME = Dimension(time=1)
ENERGY = Dimension(length=2, mass=1, time=-2)

# Concrete quantity class per dimension, filled in by Quantity.__init_subclass__
_REGISTRY: Dict[Dimension, Type[Quantity]] = {}


class Quantity:
    """
    A magnitude (float or numpy array) tagged with a Dimension.

    Subclasses fix the dimension through the `dimension` class attribute and
    are picked automatically as the result type of arithmetic. Results of a
    dimension without a subclass are DerivedQuantity instances; dimensionless
    results collapse to the bare magnitude.
    """

    __slots__ = ("magnitude", "_dimension")

    dimension: ClassVar[Dimension] = DIMENSIONLESS

    # numpy defers to the reflected operators below instead of broadcasting
    __array_ufunc__ = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "dimension" in cls.__dict__:
            _REGISTRY[cls.dimension] = cls

    def __init__(self, magnitude: Any, dimension: Optional[Dimension] = None):
        self.magnitude = magnitude
        self._dimension = dimension if dimension is not None else type(self).dimension

    @property
    def units(self) -> Dimension:
        return self._dimension

    @staticmethod
    def _make(magnitude: Any, dimension: Dimension) -> Any:
        if dimension.is_dimensionless:
            return magnitude
        cls = _REGISTRY.get(dimension)
        if cls is None:
            return DerivedQuantity(magnitude, dimension)
        return cls(magnitude)

    def _check_same_units(self, other: Any, operation: str) -> Quantity:
        if not isinstance(other, Quantity):
            raise DimensionError(f"cannot {operation} {self._dimension} and dimensionless {other!r}")
        if other._dimension != self._dimension:
            raise DimensionError(f"cannot {operation} {self._dimension} and {other._dimension}")
        return other

    def _mul(self, other: Any) -> Any:
        if isinstance(other, Quantity):
            return self._make(self.magnitude * other.magnitude, self._dimension * other._dimension)
        return self._make(self.magnitude * other, self._dimension)

    def _truediv(self, other: Any) -> Any:
        if isinstance(other, Quantity):
            return self._make(self.magnitude / other.magnitude, self._dimension / other._dimension)
        return self._make(self.magnitude / other, self._dimension)

    def __add__(self: _Q, other: _Q) -> _Q:
        checked = self._check_same_units(other, "add")
        return self._make(self.magnitude + checked.magnitude, self._dimension)

    def __sub__(self: _Q, other: _Q) -> _Q:
        checked = self._check_same_units(other, "subtract")
        return self._make(self.magnitude - checked.magnitude, self._dimension)

    def __neg__(self: _Q) -> _Q:
        return self._make(-self.magnitude, self._dimension)

    def __rmul__(self: _Q, other: Scalar) -> _Q:
        return self._make(other * self.magnitude, self._dimension)

    def __eq__(self, other: object) -> Any:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self._dimension == other._dimension and self.magnitude == other.magnitude

    def __hash__(self) -> int:
        return hash((self.magnitude, self._dimension))

    def __lt__(self: _Q, other: _Q) -> Any:
        return self.magnitude < self._check_same_units(other, "compare").magnitude

    def __le__(self: _Q, other: _Q) -> Any:
        return self.magnitude <= self._check_same_units(other, "compare").magnitude

    def __gt__(self: _Q, other: _Q) -> Any:
        return self.magnitude > self._check_same_units(other, "compare").magnitude

    def __ge__(self: _Q, other: _Q) -> Any:
        return self.magnitude >= self._check_same_units(other, "compare").magnitude

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.magnitude!r})"

    def __str__(self) -> str:
        return f"{self.magnitude} {self._dimension}"


class DerivedQuantity(Quantity):
    """Any dimension without a dedicated class. Arithmetic is untyped."""
    __slots__ = ()

    def __mul__(self, other: Any) -> Any:
        return self._mul(other)

    def __truediv__(self, other: Any) -> Any:
        return self._truediv(other)

    def __repr__(self) -> str:
        return f"DerivedQuantity({self.magnitude!r}, {self._dimension!r})"


class Meter(Quantity):
    __slots__ = ()
    dimension = LENGTH

    @overload
    def __mul__(self, other: Second) -> MeterSecond: ...
    @overload
    def __mul__(self, other: Scalar) -> Meter: ...
    def __mul__(self, other: Any) -> Any:
        return self._mul(other)

    @overload
    def __truediv__(self, other: Second) -> MeterPerSecond: ...
    @overload
    def __truediv__(self, other: Scalar) -> Meter: ...
    def __truediv__(self, other: Any) -> Any:
        return self._truediv(other)


class Second(Quantity):
    __slots__ = ()
    dimension = TIME

    @overload
    def __mul__(self, other: Meter) -> MeterSecond: ...
    @overload
    def __mul__(self, other: Scalar) -> Second: ...
    def __mul__(self, other: Any) -> Any:
        return self._mul(other)

    def __truediv__(self, other: Scalar) -> Second:
        return self._truediv(other)


class Joule(Quantity):
    __slots__ = ()
    dimension = ENERGY

    def __mul__(self, other: Scalar) -> Joule:
        return self._mul(other)

    @overload
    def __truediv__(self, other: Meter) -> JoulePerMeter: ...
    @overload
    def __truediv__(self, other: MeterSecond) -> JoulePerMeterSecond: ...
    @overload
    def __truediv__(self, other: MeterPerSecond) -> JouleSecondPerMeter: ...
    @overload
    def __truediv__(self, other: Scalar) -> Joule: ...
    def __truediv__(self, other: Any) -> Any:
        return self._truediv(other)


class MeterSecond(Quantity):
    """Integral of a length error over time."""
    __slots__ = ()
    dimension = LENGTH * TIME

    def __mul__(self, other: Scalar) -> MeterSecond:
        return self._mul(other)

    def __truediv__(self, other: Scalar) -> MeterSecond:
        return self._truediv(other)


class MeterPerSecond(Quantity):
    """Rate of change of a length error."""
    __slots__ = ()
    dimension = LENGTH / TIME

    def __mul__(self, other: Scalar) -> MeterPerSecond:
        return self._mul(other)

    def __truediv__(self, other: Scalar) -> MeterPerSecond:
        return self._truediv(other)


class JoulePerMeter(Quantity):
    """Proportional gain from a length error to energy."""
    __slots__ = ()
    dimension = ENERGY / LENGTH

    @overload
    def __mul__(self, other: Meter) -> Joule: ...
    @overload
    def __mul__(self, other: Scalar) -> JoulePerMeter: ...
    def __mul__(self, other: Any) -> Any:
        return self._mul(other)


class JoulePerMeterSecond(Quantity):
    """Integral gain from an accumulated length error to energy."""
    __slots__ = ()
    dimension = ENERGY / (LENGTH * TIME)

    @overload
    def __mul__(self, other: MeterSecond) -> Joule: ...
    @overload
    def __mul__(self, other: Scalar) -> JoulePerMeterSecond: ...
    def __mul__(self, other: Any) -> Any:
        return self._mul(other)


class JouleSecondPerMeter(Quantity):
    """Derivative gain from a length error rate to energy."""
    __slots__ = ()
    dimension = ENERGY / (LENGTH / TIME)

    @overload
    def __mul__(self, other: MeterPerSecond) -> Joule: ...
    @overload
    def __mul__(self, other: Scalar) -> JouleSecondPerMeter: ...
    def __mul__(self, other: Any) -> Any:
        return self._mul(other)


M = Meter(1.0)
S = Second(1.0)
J = Joule(1.0)
