"""Nonlinear conceptual reservoirs and their discharge outlets.

A reservoir holds a storage height between a floor and a ceiling and drains
through one or more outlets. Each outlet is a stateless discharge law of the
current storage; the reservoir advances its storage by mass balance and keeps
the velocity of every outlet from its last response for downstream routing.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .processes import exponential_outlet_velocity, linear_outlet_velocity

# Sentinel for an outlet without a velocity cap
NO_VELOCITY_CAP = None


class OutletKind(str, Enum):
    """Discharge law of a reservoir outlet."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class ReservoirOutlet:
    """A reservoir outlet, tagged by its discharge law.

    Attributes:
        kind: Discharge law used to evaluate the outlet.
        coefficient: Outlet coefficient (a for linear, Cgw for exponential).
        exponent: Power on the storage above threshold (linear) or the
            expansion factor on the storage ratio (exponential) [-].
        activation_threshold_meters: Storage at or below which the outlet is dry [m].
        max_velocity: Velocity cap [m/s], or NO_VELOCITY_CAP.
    """

    kind: OutletKind
    coefficient: float
    exponent: float = 1.0
    activation_threshold_meters: float = 0.0
    max_velocity: float | None = NO_VELOCITY_CAP

    @classmethod
    def linear(
        cls,
        coefficient: float,
        exponent: float = 1.0,
        activation_threshold_meters: float = 0.0,
        max_velocity: float | None = NO_VELOCITY_CAP,
    ) -> ReservoirOutlet:
        """Build a threshold-activated power-law outlet."""
        return cls(OutletKind.LINEAR, coefficient, exponent, activation_threshold_meters, max_velocity)

    @classmethod
    def exponential(
        cls,
        coefficient: float,
        expansion_factor: float,
        activation_threshold_meters: float = 0.0,
        max_velocity: float | None = NO_VELOCITY_CAP,
    ) -> ReservoirOutlet:
        """Build an exponential outlet, as used for groundwater."""
        return cls(OutletKind.EXPONENTIAL, coefficient, expansion_factor, activation_threshold_meters, max_velocity)

    def velocity(self, storage_meters: float, max_storage_meters: float) -> float:
        """Discharge velocity at the given storage [m/s], clamped to [0, max_velocity]."""
        if self.kind is OutletKind.LINEAR:
            velocity = linear_outlet_velocity(
                storage_meters, self.coefficient, self.exponent, self.activation_threshold_meters
            )
        elif self.kind is OutletKind.EXPONENTIAL:
            velocity = exponential_outlet_velocity(
                storage_meters,
                max_storage_meters,
                self.coefficient,
                self.exponent,
                self.activation_threshold_meters,
            )
        else:
            msg = f"Unsupported outlet kind: {self.kind!r}"
            raise ValueError(msg)

        velocity = max(velocity, 0.0)
        if self.max_velocity is not NO_VELOCITY_CAP and velocity > self.max_velocity:
            velocity = self.max_velocity
        return velocity


class NonlinearReservoir:
    """A conceptual reservoir draining through a set of outlets.

    Storage is advanced explicitly over each timestep from the outlet
    velocities evaluated at the storage held at the start of the step. The
    storage never leaves [min_storage, max_storage]: outflow that would empty
    the reservoir past its floor is scaled down, and water above the ceiling
    is handed back to the caller as excess.
    """

    def __init__(
        self,
        min_storage_meters: float,
        max_storage_meters: float,
        storage_meters: float,
        outlets: Sequence[ReservoirOutlet] = (),
    ) -> None:
        self.min_storage_meters = float(min_storage_meters)
        self.max_storage_meters = float(max_storage_meters)
        self.outlets: tuple[ReservoirOutlet, ...] = tuple(outlets)
        self.storage_meters = storage_meters
        self._velocities: list[float] = [0.0] * len(self.outlets)

    @classmethod
    def single_outlet(
        cls,
        min_storage_meters: float,
        max_storage_meters: float,
        storage_meters: float,
        coefficient: float,
        exponent: float,
        activation_threshold_meters: float,
        max_velocity: float | None,
    ) -> NonlinearReservoir:
        """Build a reservoir with a single linear outlet."""
        outlet = ReservoirOutlet.linear(coefficient, exponent, activation_threshold_meters, max_velocity)
        return cls(min_storage_meters, max_storage_meters, storage_meters, [outlet])

    @property
    def storage_meters(self) -> float:
        """Current storage height [m]."""
        return self._storage_meters

    @storage_meters.setter
    def storage_meters(self, value: float) -> None:
        self._storage_meters = min(max(float(value), self.min_storage_meters), self.max_storage_meters)

    def __len__(self) -> int:
        return len(self.outlets)

    def velocity_for_outlet(self, index: int) -> float:
        """Velocity of one outlet from the last call to response() [m/s]."""
        return self._velocities[index]

    def response(self, input_rate: float, dt: float) -> tuple[float, float]:
        """Advance the reservoir over one timestep.

        Args:
            input_rate: Inflow [m/s]. Negative values are treated as zero.
            dt: Timestep size [s].

        Returns:
            Tuple of (total_velocity, excess_meters):
            - total_velocity: Sum of outlet velocities over the step [m/s]
            - excess_meters: Water above the storage ceiling [m]
        """
        velocities = [outlet.velocity(self._storage_meters, self.max_storage_meters) for outlet in self.outlets]
        total_velocity = sum(velocities)

        available = self._storage_meters + max(input_rate, 0.0) * dt
        drainable = max(available - self.min_storage_meters, 0.0)
        if total_velocity * dt > drainable:
            # Cannot discharge more than is held above the floor
            scale = drainable / (total_velocity * dt)
            velocities = [velocity * scale for velocity in velocities]
            total_velocity = sum(velocities)
            new_storage = self.min_storage_meters
        else:
            new_storage = available - total_velocity * dt

        excess_meters = 0.0
        if new_storage > self.max_storage_meters:
            excess_meters = new_storage - self.max_storage_meters
            new_storage = self.max_storage_meters

        self._storage_meters = max(new_storage, self.min_storage_meters)
        self._velocities = velocities
        return total_velocity, excess_meters
