"""Run the Tshirt model over a forcing time series.

This module provides the multi-timestep entry point:
- run(): Drive one TshirtModel through every timestep of a ForcingData series
"""

from __future__ import annotations

import logging

import numpy as np

from .constants import MASS_CHECK_ERROR_BOUND
from .evapotranspiration import BudykoEvapotranspiration, EvapotranspirationModel
from .inputs import ForcingData
from .model import MassBalanceResult, TshirtModel
from .outputs import ModelOutput, TshirtFluxes
from .types import Parameters, State

logger = logging.getLogger(__name__)


def run(
    params: Parameters,
    forcing: ForcingData,
    initial_state: State | None = None,
    et_model: EvapotranspirationModel | None = None,
    mass_check_error_bound: float = MASS_CHECK_ERROR_BOUND,
) -> ModelOutput:
    """Run the Tshirt model over a time series.

    Args:
        params: Model parameters.
        forcing: Input water (and optionally PET) per timestep.
        initial_state: Starting storages. Defaults to empty stores.
        et_model: Evapotranspiration capability applied at every timestep.
            When omitted and forcing.pet is given, a BudykoEvapotranspiration
            is built each timestep from that timestep's PET.
        mass_check_error_bound: Largest tolerated mass balance difference [m].

    Returns:
        ModelOutput with per-timestep fluxes, storages and mass balance codes.
    """
    model = TshirtModel(params, initial_state)
    model.mass_check_error_bound = mass_check_error_bound
    dt = forcing.timestep_seconds
    wilting_point = params.wilting_point_storage_meters

    n = len(forcing)
    columns = {
        name: np.zeros(n, dtype=np.float64)
        for name in (
            "et_loss",
            "surface_runoff",
            "soil_lateral_flow",
            "soil_percolation_flow",
            "groundwater_flow",
            "soil_storage",
            "groundwater_storage",
            "nash_storage",
        )
    }
    mass_balance = np.zeros(n, dtype=np.int64)

    for t in range(n):
        step_et_model = et_model
        if step_et_model is None and forcing.pet is not None:
            step_et_model = BudykoEvapotranspiration(
                pet_meters=float(forcing.pet[t]),
                wilting_point_meters=wilting_point,
                field_capacity_meters=model.soil_field_capacity_storage,
            )

        mass_balance[t] = model.run(dt, float(forcing.input_flux[t]), step_et_model)

        fluxes = model.fluxes
        state = model.current_state
        columns["et_loss"][t] = fluxes.et_loss_meters
        columns["surface_runoff"][t] = fluxes.surface_runoff_meters_per_second
        columns["soil_lateral_flow"][t] = fluxes.soil_lateral_flow_meters_per_second
        columns["soil_percolation_flow"][t] = fluxes.soil_percolation_flow_meters_per_second
        columns["groundwater_flow"][t] = fluxes.groundwater_flow_meters_per_second
        columns["soil_storage"][t] = state.soil_storage_meters
        columns["groundwater_storage"][t] = state.groundwater_storage_meters
        columns["nash_storage"][t] = float(np.sum(state.nash_cascade_storage_meters))

    n_errors = int(np.count_nonzero(mass_balance != MassBalanceResult.OK))
    if n_errors:
        logger.warning("%d of %d timesteps failed the mass balance check", n_errors, n)

    streamflow = columns["surface_runoff"] + columns["soil_lateral_flow"] + columns["groundwater_flow"]
    tshirt_fluxes = TshirtFluxes(
        input_flux=forcing.input_flux.copy(),
        mass_balance=mass_balance,
        streamflow=streamflow,
        **columns,
    )
    return ModelOutput(time=forcing.time, fluxes=tshirt_fluxes)
