import logging
from typing import Any, Generic, Protocol, TypeVar, cast

from ...logger import get_logger

In_contra = TypeVar("In_contra", contravariant=True)
Out_co = TypeVar("Out_co", covariant=True)
Measure_contra = TypeVar("Measure_contra", contravariant=True)
Time_contra = TypeVar("Time_contra", contravariant=True)
Integral_co = TypeVar("Integral_co", covariant=True)
Derivative_co = TypeVar("Derivative_co", covariant=True)


class Scales(Protocol[In_contra, Out_co]):
    """A gain: multiplying it by an `In` quantity yields an `Out` quantity."""

    def __mul__(self, other: In_contra, /) -> Out_co:
        ...


class Steps(Protocol[Time_contra, Integral_co, Derivative_co]):
    """An error that integrates to `Integral` and differentiates to `Derivative` over a `Time` step."""

    def __mul__(self, other: Time_contra, /) -> Integral_co:
        ...

    def __truediv__(self, other: Time_contra, /) -> Derivative_co:
        ...


class Signal(Protocol):
    def __sub__(self, other: Any, /) -> Any:
        ...

    def __mul__(self, other: Any, /) -> Any:
        ...

    def __truediv__(self, other: Any, /) -> Any:
        ...


class Summable(Protocol):
    def __add__(self, other: Any, /) -> Any:
        ...


Measure = TypeVar("Measure", bound=Signal)
Control = TypeVar("Control", bound=Summable)
Time = TypeVar("Time")
Integral = TypeVar("Integral", bound=Summable)
Derivative = TypeVar("Derivative")


class PidController(Protocol[Measure_contra, Out_co, Time_contra]):
    def update(self, error: Measure_contra, elapsed: Time_contra) -> None:
        ...

    def output(self) -> Out_co:
        ...


class Controller(Generic[Measure, Control, Time, Integral, Derivative]):
    """
    Discrete-time PID controller.

    Generic over the error type (Measure), the output type (Control), the
    time step type (Time), and the types of the error integral
    (Measure * Time) and the error rate (Measure / Time). The gains are typed
    by what they scale: k_p turns a Measure into a Control, k_i an Integral
    and k_d a Derivative. The error seed must give exactly Integral when
    multiplied by a Time and Derivative when divided by one, so declaring the
    two derived types the wrong way round is a type error too. With
    dimensioned quantity types a gain of the wrong unit is rejected by the
    type checker.

    There is no clamping and no anti-windup: the output is the raw sum of
    the three terms.
    """

    def __init__(
        self,
        k_p: Scales[Measure, Control],
        k_i: Scales[Integral, Control],
        k_d: Scales[Derivative, Control],
        initial_output: Control,
        initial_error: Steps[Time, Integral, Derivative],
        initial_accumulated_error: Integral,
    ):
        self._k_p = k_p
        self._k_i = k_i
        self._k_d = k_d

        # State
        self._output = initial_output
        # Same value as a Measure; Steps only pins Integral and Derivative to it
        self._previous_error = cast(Measure, initial_error)
        self._accumulated_error = initial_accumulated_error

        self.logger = get_logger(self.__class__.__name__)
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("ControllerCreated", {"k_p": k_p, "k_i": k_i, "k_d": k_d})

    @property
    def k_p(self) -> Scales[Measure, Control]:
        return self._k_p

    @property
    def k_i(self) -> Scales[Integral, Control]:
        return self._k_i

    @property
    def k_d(self) -> Scales[Derivative, Control]:
        return self._k_d

    @property
    def previous_error(self) -> Measure:
        return self._previous_error

    @property
    def accumulated_error(self) -> Integral:
        return self._accumulated_error

    def update(self, error: Measure, elapsed: Time) -> None:
        """
        Advance the loop by one step.

        error: Target - Measured
        elapsed: time since the previous update, must be non-zero
        """
        # Everything is computed before any state changes so a failing
        # operation leaves the controller untouched. State is rebound, never
        # updated in place: seeds may be arrays the caller still holds.
        accumulated_error: Integral = self._accumulated_error + error * elapsed
        error_delta: Derivative = (error - self._previous_error) / elapsed

        p_term = self._k_p * error
        i_term = self._k_i * accumulated_error
        d_term = self._k_d * error_delta
        output: Control = p_term + i_term + d_term

        self._accumulated_error = accumulated_error
        self._previous_error = error
        self._output = output

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("ControllerUpdate", {
                "error": error,
                "elapsed": elapsed,
                "accumulated_error": accumulated_error,
                "error_delta": error_delta,
                "output": output,
            })

    def output(self) -> Control:
        """Last computed control value (the initial output before any update)."""
        return self._output


ScalarController = Controller[float, float, float, float, float]
