"""Evapotranspiration coupling for the soil reservoir.

The engine treats evapotranspiration as an external capability: anything with
an ``adjust(height)`` method returning the soil storage height left after
evapotranspiration. Two capabilities are provided here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class EvapotranspirationModel(Protocol):
    """Capability reducing a soil storage height by evapotranspiration."""

    def adjust(self, height_meters: float) -> float:
        """Return the storage height [m] remaining after evapotranspiration."""
        ...


def evapotranspiration_loss(height_meters: float, et_model: EvapotranspirationModel) -> float:
    """Water removed from a store of the given height by an ET model [m].

    Nothing is clamped: a model returning a greater height than it was given
    yields a negative loss.
    """
    return height_meters - et_model.adjust(height_meters)


@dataclass(frozen=True)
class NoEvapotranspiration:
    """Leaves the storage untouched."""

    def adjust(self, height_meters: float) -> float:
        return height_meters


@dataclass(frozen=True)
class BudykoEvapotranspiration:
    """Actual ET from soil limited by a Budyko-type moisture stress curve.

    Full potential ET is drawn at or above field capacity. Between the wilting
    point and field capacity it is scaled linearly by the relative moisture;
    at or below the wilting point nothing evaporates. ET never exceeds the
    water held in the store.

    Attributes:
        pet_meters: Potential evapotranspiration over the timestep [m].
        wilting_point_meters: Storage at the wilting point [m].
        field_capacity_meters: Storage at field capacity [m].
    """

    pet_meters: float
    wilting_point_meters: float
    field_capacity_meters: float

    def actual_et(self, height_meters: float) -> float:
        """Actual evapotranspiration from a store of the given height [m]."""
        if self.pet_meters <= 0.0 or height_meters <= self.wilting_point_meters:
            return 0.0

        if height_meters >= self.field_capacity_meters:
            return min(self.pet_meters, height_meters)

        budyko = (height_meters - self.wilting_point_meters) / (
            self.field_capacity_meters - self.wilting_point_meters
        )
        return min(budyko * self.pet_meters, height_meters)

    def adjust(self, height_meters: float) -> float:
        return height_meters - self.actual_et(height_meters)
