"""Input data structures for driving the Tshirt model over a time series.

This module defines validated input containers:
- ForcingData: Per-timestep water input and optional potential evapotranspiration
"""

from __future__ import annotations

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# Accepted relative deviation of the time spacing from timestep_seconds
_TIMESTEP_TOLERANCE: float = 0.1


def _validate_depth_array(name: str, v: np.ndarray) -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64)
    if arr.ndim != 1:
        msg = f"{name} array must be 1D, got {arr.ndim}D"
        raise ValueError(msg)
    if np.any(np.isnan(arr)):
        msg = f"{name} array contains NaN values"
        raise ValueError(msg)
    if np.any(arr < 0.0):
        msg = f"{name} array contains negative values"
        raise ValueError(msg)
    return arr


class ForcingData(BaseModel):
    """Validated forcing data for the Tshirt model.

    All arrays must be 1D with the same length. NaN and negative values are
    rejected. Numeric arrays are coerced to float64.

    Attributes:
        time: Datetime array for each timestep (datetime64).
        input_flux: Water reaching the soil surface in each timestep [m].
        pet: Potential evapotranspiration in each timestep [m]. Optional.
        timestep_seconds: Length of one timestep [s].
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    time: np.ndarray  # datetime64
    input_flux: np.ndarray  # [m]
    pet: np.ndarray | None = None  # [m]
    timestep_seconds: float = 3600.0

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, v: np.ndarray) -> np.ndarray:
        """Validate time array: must be 1D and coerced to datetime64."""
        arr = np.asarray(v)
        if arr.ndim != 1:
            msg = f"time array must be 1D, got {arr.ndim}D"
            raise ValueError(msg)
        return arr.astype("datetime64[ns]")

    @field_validator("input_flux", mode="before")
    @classmethod
    def validate_input_flux(cls, v: np.ndarray) -> np.ndarray:
        """Validate input_flux array: 1D float64, no NaN, no negatives."""
        return _validate_depth_array("input_flux", v)

    @field_validator("pet", mode="before")
    @classmethod
    def validate_pet(cls, v: np.ndarray | None) -> np.ndarray | None:
        """Validate pet array if provided: 1D float64, no NaN, no negatives."""
        if v is None:
            return None
        return _validate_depth_array("pet", v)

    @field_validator("timestep_seconds")
    @classmethod
    def validate_timestep_seconds(cls, v: float) -> float:
        if v <= 0.0:
            msg = f"timestep_seconds must be positive, got {v}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_array_lengths(self) -> ForcingData:
        """Ensure all arrays have the same length."""
        n = len(self.time)
        if len(self.input_flux) != n:
            msg = f"input_flux length {len(self.input_flux)} does not match time length {n}"
            raise ValueError(msg)
        if self.pet is not None and len(self.pet) != n:
            msg = f"pet length {len(self.pet)} does not match time length {n}"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def validate_time_spacing(self) -> ForcingData:
        """Ensure the time spacing agrees with timestep_seconds."""
        if len(self.time) <= 1:
            return self
        median_gap_seconds = float(np.median(np.diff(self.time)) / np.timedelta64(1, "s"))
        if abs(median_gap_seconds - self.timestep_seconds) > _TIMESTEP_TOLERANCE * self.timestep_seconds:
            msg = (
                f"Time spacing (median {median_gap_seconds:.1f} s) does not match "
                f"timestep_seconds={self.timestep_seconds:.1f}"
            )
            raise ValueError(msg)
        return self

    def __len__(self) -> int:
        """Return the number of timesteps."""
        return len(self.time)
