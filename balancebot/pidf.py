"""PID controller with feedforward term."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass
class PIDFGains:
    """Proportional, integral, derivative and feedforward gains."""

    kp: float = 0.0
    ki: float = 0.0
    kd: float = 0.0
    kf: float = 0.0


@dataclass
class PIDError:
    """The P, I and D error terms of the last update."""

    p: float
    i: float
    d: float


def _clip(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class PIDF:
    """PID controller with feedforward, integral clamping and saturation reset.

    ``setpoint``, ``integral_max``, ``integral_threshold`` and
    ``output_saturation_value`` are plain attributes; an integral_max or
    output_saturation_value of zero disables that feature.
    """

    def __init__(self, gains: PIDFGains | None = None) -> None:
        self.gains = replace(gains) if gains is not None else PIDFGains()
        self.setpoint = 0.0
        self.integral_max = 0.0
        self.integral_threshold = 0.0
        self.output_saturation_value = 0.0
        self._error_derivative = 0.0
        self._error_integral = 0.0
        self._error_previous = 0.0
        self._measurement_previous = 0.0

    def reset_integral(self) -> None:
        self._error_integral = 0.0

    def update(self, measurement: float, delta_t: float) -> float:
        """Compute the output, deriving the measurement change from the previous one."""
        return self.update_delta(measurement, measurement - self._measurement_previous, delta_t)

    def update_delta(self, measurement: float, measurement_delta: float, delta_t: float) -> float:
        """Compute the output using a supplied (possibly filtered) measurement change."""
        gains = self.gains
        error = self.setpoint - measurement

        if abs(error) > self.integral_threshold:
            # trapezoidal integration
            self._error_integral += gains.ki * 0.5 * (error + self._error_previous) * delta_t
            if self.integral_max > 0.0:
                self._error_integral = _clip(self._error_integral, -self.integral_max, self.integral_max)

        p_value = gains.kp * error
        if self.output_saturation_value != 0.0 and abs(p_value) > self.output_saturation_value:
            # output already saturated by P; keeping the integral would only cause overshoot
            self._error_integral = 0.0

        self._error_derivative = -measurement_delta / delta_t
        self._error_previous = error
        self._measurement_previous = measurement

        return p_value + self._error_integral + gains.kd * self._error_derivative + gains.kf * self.setpoint

    def error(self) -> PIDError:
        """Return the gain-weighted error terms."""
        return PIDError(
            p=self._error_previous * self.gains.kp,
            i=self._error_integral,
            d=self._error_derivative * self.gains.kd,
        )

    def error_raw(self) -> PIDError:
        """Return the error terms without gains applied."""
        ki = self.gains.ki
        return PIDError(
            p=self._error_previous,
            i=0.0 if ki == 0.0 else self._error_integral / ki,
            d=self._error_derivative,
        )