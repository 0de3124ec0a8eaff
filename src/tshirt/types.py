"""Tshirt data structures for parameters, state variables and fluxes.

This module defines the core data types used by the Tshirt model:
- Parameters: The soil, lateral flow, groundwater and cascade parameters
- State: The storages carried from one timestep to the next
- Fluxes: The per-timestep flux record
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields

import numpy as np

from .constants import DEFAULT_BOUNDS, PARAM_NAMES, REF_SATDK, REFKDT, compute_state_size

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a model cannot be built from the given parameters or state."""


# Parameters that must never be negative
_NON_NEGATIVE: tuple[str, ...] = (
    "maxsmc",
    "satdk",
    "satpsi",
    "slope",
    "alpha_fc",
    "klf",
    "kn",
    "cgw",
    "expon",
    "wltsmc",
    "multiplier",
    "max_lateral_flow",
    "cschaake",
)


def _warn_if_outside_bounds(params: Parameters) -> None:
    """Log warnings for parameters outside typical ranges.

    This does not raise errors - parameters outside bounds may still be valid
    for specific catchments or research purposes.
    """
    for name, (lower, upper) in DEFAULT_BOUNDS.items():
        value = getattr(params, name)
        if value < lower or value > upper:
            logger.warning(
                "Parameter %s=%.4g is outside typical range [%.4g, %.4g]",
                name,
                value,
                lower,
                upper,
            )


@dataclass(frozen=True)
class Parameters:
    """Tshirt model parameters.

    A frozen dataclass to prevent accidental modification during simulation.
    The two optional rate parameters are resolved from the soil properties
    when left as None.

    Attributes:
        maxsmc: Saturated soil moisture content (porosity) [m3/m3].
        satdk: Saturated hydraulic conductivity [m/s].
        satpsi: Saturated soil matric potential [m].
        b: Brooks-Corey pore size distribution index [-], must exceed 1.
        slope: Linear scaling of the percolation outlet [-].
        alpha_fc: Scaling of the suction head used for field capacity [-].
        klf: Soil lateral flow outlet coefficient [1/s].
        kn: Coefficient of each Nash cascade reservoir [1/s].
        nash_n: Number of Nash cascade reservoirs [-].
        cgw: Groundwater exponential outlet coefficient [m/s].
        expon: Groundwater exponential outlet expansion factor [-].
        max_soil_storage_meters: Soil reservoir ceiling [m].
        max_groundwater_storage_meters: Groundwater reservoir ceiling [m].
        wltsmc: Wilting point soil moisture content [m3/m3].
        multiplier: Multiplier of satdk giving the lateral flow velocity cap [-].
        max_lateral_flow: Lateral flow velocity cap [m/s]. Defaults to satdk * multiplier.
        cschaake: Schaake infiltration coefficient [1/day]. Defaults to
            REFKDT * satdk / REF_SATDK.
    """

    maxsmc: float
    satdk: float
    satpsi: float
    b: float
    slope: float
    alpha_fc: float
    klf: float
    kn: float
    nash_n: int
    cgw: float
    expon: float
    max_soil_storage_meters: float
    max_groundwater_storage_meters: float
    wltsmc: float = 0.0
    multiplier: float = 1.0
    max_lateral_flow: float | None = None
    cschaake: float | None = None

    def __post_init__(self) -> None:
        """Resolve derived parameters and validate invariants."""
        if self.max_lateral_flow is None:
            object.__setattr__(self, "max_lateral_flow", self.satdk * self.multiplier)
        if self.cschaake is None:
            object.__setattr__(self, "cschaake", REFKDT * self.satdk / REF_SATDK)

        for name in PARAM_NAMES:
            value = getattr(self, name)
            if not math.isfinite(value):
                msg = f"Parameter {name} must be finite, got {value}"
                raise ConfigurationError(msg)

        if isinstance(self.nash_n, bool) or int(self.nash_n) != self.nash_n or self.nash_n < 0:
            msg = f"nash_n must be a non-negative integer, got {self.nash_n!r}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "nash_n", int(self.nash_n))

        for name in _NON_NEGATIVE:
            value = getattr(self, name)
            if value < 0.0:
                msg = f"Parameter {name} must be non-negative, got {value}"
                raise ConfigurationError(msg)
        if self.b <= 1.0:
            msg = f"Parameter b must be greater than 1, got {self.b}"
            raise ConfigurationError(msg)
        for name in ("satpsi", "max_soil_storage_meters", "max_groundwater_storage_meters"):
            value = getattr(self, name)
            if value <= 0.0:
                msg = f"Parameter {name} must be positive, got {value}"
                raise ConfigurationError(msg)

        _warn_if_outside_bounds(self)

    @property
    def wilting_point_storage_meters(self) -> float:
        """Soil storage at the wilting point [m].

        The soil column depth is implied by max_soil_storage_meters / maxsmc.
        """
        if self.maxsmc <= 0.0:
            return 0.0
        return self.wltsmc / self.maxsmc * self.max_soil_storage_meters

    def __array__(self, dtype: np.dtype | None = None, copy: bool | None = None) -> np.ndarray:
        """Convert parameters to a 1D array in PARAM_NAMES order."""
        arr = np.array([getattr(self, name) for name in PARAM_NAMES], dtype=np.float64)
        if dtype is not None:
            arr = arr.astype(dtype)
        return arr

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Parameters:
        """Reconstruct Parameters from array."""
        values = {name: float(arr[i]) for i, name in enumerate(PARAM_NAMES)}
        values["nash_n"] = int(round(values["nash_n"]))
        return cls(**values)


@dataclass
class State:
    """Tshirt model state variables.

    Attributes:
        soil_storage_meters: Soil reservoir storage [m].
        groundwater_storage_meters: Groundwater reservoir storage [m].
        nash_cascade_storage_meters: Storage of each Nash cascade reservoir [m].
    """

    soil_storage_meters: float
    groundwater_storage_meters: float
    nash_cascade_storage_meters: np.ndarray

    def __post_init__(self) -> None:
        self.nash_cascade_storage_meters = np.array(self.nash_cascade_storage_meters, dtype=np.float64).reshape(-1)

    @classmethod
    def initialize(
        cls,
        params: Parameters,
        soil_storage: float = 0.0,
        groundwater_storage: float = 0.0,
        storage_values_are_ratios: bool = False,
        nash_storage: np.ndarray | list[float] | None = None,
    ) -> State:
        """Create initial state from parameters.

        Args:
            params: Model parameters giving the maximum storages.
            soil_storage: Initial soil storage, in meters or as a ratio of the maximum.
            groundwater_storage: Initial groundwater storage, in meters or as a ratio.
            storage_values_are_ratios: Interpret the two storages as ratios of the
                corresponding maximum storage instead of absolute meters.
            nash_storage: Initial Nash cascade storages [m]. None starts every
                reservoir of the cascade empty.

        Returns:
            Initialized State object ready for simulation.
        """
        if storage_values_are_ratios:
            soil_storage = soil_storage * params.max_soil_storage_meters
            groundwater_storage = groundwater_storage * params.max_groundwater_storage_meters
        if nash_storage is None:
            nash_storage = np.zeros(params.nash_n, dtype=np.float64)

        return cls(
            soil_storage_meters=float(soil_storage),
            groundwater_storage_meters=float(groundwater_storage),
            nash_cascade_storage_meters=np.asarray(nash_storage, dtype=np.float64),
        )

    @property
    def nash_n(self) -> int:
        """Number of Nash cascade reservoirs held in this state."""
        return len(self.nash_cascade_storage_meters)

    @property
    def total_storage_meters(self) -> float:
        """Water held in all stores [m]."""
        return float(
            self.soil_storage_meters + self.groundwater_storage_meters + np.sum(self.nash_cascade_storage_meters)
        )

    def copy(self) -> State:
        """Return an independent snapshot of this state."""
        return State(
            soil_storage_meters=self.soil_storage_meters,
            groundwater_storage_meters=self.groundwater_storage_meters,
            nash_cascade_storage_meters=self.nash_cascade_storage_meters.copy(),
        )

    def __array__(self, dtype: np.dtype | None = None, copy: bool | None = None) -> np.ndarray:
        """Convert state to 1D array.

        Layout: [soil_storage, groundwater_storage, nash_storages]
        """
        arr = np.empty(compute_state_size(self.nash_n), dtype=np.float64)
        arr[0] = self.soil_storage_meters
        arr[1] = self.groundwater_storage_meters
        arr[2:] = self.nash_cascade_storage_meters

        if dtype is not None:
            arr = arr.astype(dtype)
        return arr

    @classmethod
    def from_array(cls, arr: np.ndarray, nash_n: int = 0) -> State:
        """Reconstruct State from array."""
        return cls(
            soil_storage_meters=float(arr[0]),
            groundwater_storage_meters=float(arr[1]),
            nash_cascade_storage_meters=np.array(arr[2 : 2 + nash_n], dtype=np.float64),
        )


@dataclass(frozen=True)
class Fluxes:
    """Fluxes produced by one Tshirt timestep.

    All rates are in meters per second; multiplied by the timestep they give
    the depth of water moved during that step.

    Attributes:
        et_loss_meters: Water removed from the soil by evapotranspiration [m].
        surface_runoff_meters_per_second: Direct runoff, including any
            reservoir overflow [m/s].
        soil_lateral_flow_meters_per_second: Lateral flow leaving the Nash cascade [m/s].
        soil_percolation_flow_meters_per_second: Percolation from soil to groundwater [m/s].
        groundwater_flow_meters_per_second: Groundwater discharge [m/s].
    """

    et_loss_meters: float = 0.0
    surface_runoff_meters_per_second: float = 0.0
    soil_lateral_flow_meters_per_second: float = 0.0
    soil_percolation_flow_meters_per_second: float = 0.0
    groundwater_flow_meters_per_second: float = 0.0

    def outgoing_volume_meters(self, dt: float) -> float:
        """Water leaving the system during a timestep of dt seconds [m].

        Percolation stays inside the system and is not counted.
        """
        return self.et_loss_meters + dt * (
            self.surface_runoff_meters_per_second
            + self.soil_lateral_flow_meters_per_second
            + self.groundwater_flow_meters_per_second
        )

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary of flux values."""
        return {field.name: getattr(self, field.name) for field in fields(self)}
