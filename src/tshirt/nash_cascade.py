"""Nash cascade routing of soil lateral flow.

A chain of identical single-outlet linear reservoirs: the discharge of each
reservoir is the inflow of the next, delaying and attenuating the signal.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .reservoir import NonlinearReservoir


class NashCascade:
    """An ordered chain of linear reservoirs sharing one coefficient.

    Args:
        storages: Initial storage of each reservoir [m]; its length is the
            number of reservoirs. An empty sequence gives the identity cascade.
        kn: Outlet coefficient of every reservoir [1/s].
        max_storage_meters: Storage ceiling of every reservoir [m].
        max_velocity: Outlet velocity cap of every reservoir [m/s], or None.
    """

    def __init__(
        self,
        storages: Sequence[float] | np.ndarray,
        kn: float,
        max_storage_meters: float,
        max_velocity: float | None,
    ) -> None:
        self.reservoirs: list[NonlinearReservoir] = [
            NonlinearReservoir.single_outlet(0.0, max_storage_meters, float(storage), kn, 1.0, 0.0, max_velocity)
            for storage in storages
        ]

    def __len__(self) -> int:
        return len(self.reservoirs)

    @property
    def storages(self) -> np.ndarray:
        """Current storage of each reservoir [m]."""
        return np.array([reservoir.storage_meters for reservoir in self.reservoirs], dtype=np.float64)

    def route(self, input_rate: float, dt: float) -> float:
        """Route an inflow through every reservoir of the cascade.

        Water spilling over a reservoir's ceiling is passed straight on to the
        next reservoir as an extra rate of excess / dt.

        Args:
            input_rate: Inflow to the first reservoir [m/s].
            dt: Timestep size [s].

        Returns:
            Outflow of the last reservoir [m/s], or the inflow itself when the
            cascade is empty.
        """
        rate = input_rate
        for reservoir in self.reservoirs:
            rate, excess = reservoir.response(rate, dt)
            rate += excess / dt
        return rate
