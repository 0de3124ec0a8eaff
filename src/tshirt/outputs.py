"""Structured output dataclasses for Tshirt simulation results.

This module provides dataclasses for organizing and accessing model outputs:
- TshirtFluxes: Per-timestep fluxes, storages and mass balance codes as arrays
- ModelOutput: Flux outputs combined with the time index
"""

from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class TshirtFluxes:
    """Tshirt flux outputs as arrays.

    All arrays have the same length as the input forcing data.

    Attributes:
        input_flux: Water input [m].
        et_loss: Evapotranspiration loss [m].
        surface_runoff: Surface runoff including reservoir overflow [m/s].
        soil_lateral_flow: Lateral flow leaving the Nash cascade [m/s].
        soil_percolation_flow: Percolation from soil to groundwater [m/s].
        groundwater_flow: Groundwater discharge [m/s].
        soil_storage: Soil storage after timestep [m].
        groundwater_storage: Groundwater storage after timestep [m].
        nash_storage: Total Nash cascade storage after timestep [m].
        mass_balance: MassBalanceResult code of each timestep.
        streamflow: Surface runoff + lateral flow + groundwater flow [m/s].
    """

    input_flux: np.ndarray
    et_loss: np.ndarray
    surface_runoff: np.ndarray
    soil_lateral_flow: np.ndarray
    soil_percolation_flow: np.ndarray
    groundwater_flow: np.ndarray
    soil_storage: np.ndarray
    groundwater_storage: np.ndarray
    nash_storage: np.ndarray
    mass_balance: np.ndarray
    streamflow: np.ndarray

    def to_dict(self) -> dict[str, np.ndarray]:
        """Convert to dictionary of arrays.

        Returns:
            Dictionary mapping field names to their numpy array values.
        """
        return {field.name: getattr(self, field.name) for field in fields(self)}


@dataclass(frozen=True)
class ModelOutput:
    """Complete model output combining flux outputs with the time index.

    Attributes:
        time: Datetime array for each timestep.
        fluxes: Tshirt flux outputs.
    """

    time: np.ndarray
    fluxes: TshirtFluxes

    @property
    def streamflow(self) -> np.ndarray:
        """Total simulated outflow [m/s]."""
        return self.fluxes.streamflow

    @property
    def mass_balance_errors(self) -> int:
        """Number of timesteps that failed the mass balance check."""
        return int(np.count_nonzero(self.fluxes.mass_balance))

    def __len__(self) -> int:
        """Return the number of timesteps."""
        return len(self.time)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with time index.

        Returns:
            DataFrame with all flux outputs and time as index.
        """
        df = pd.DataFrame(self.fluxes.to_dict(), index=self.time)
        df.index.name = "time"
        return df
