"""Tshirt model orchestration.

This module provides the TshirtModel class, which owns the soil reservoir,
the groundwater reservoir and the lateral flow Nash cascade of one spatial
unit, and advances them one timestep at a time:

1. Schaake partitioning of the input into surface runoff and infiltration
2. Soil reservoir response (lateral flow and percolation outlets)
3. Evapotranspiration from the routed soil storage
4. Nash cascade routing of the lateral flow
5. Groundwater reservoir response to percolation
6. Mass balance check
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from enum import IntEnum

import numpy as np

from .constants import LATERAL_FLOW_OUTLET_INDEX, MASS_CHECK_ERROR_BOUND, PERCOLATION_OUTLET_INDEX
from .evapotranspiration import EvapotranspirationModel, NoEvapotranspiration, evapotranspiration_loss
from .nash_cascade import NashCascade
from .processes import schaake_partitioning, soil_field_capacity_storage
from .reservoir import NO_VELOCITY_CAP, NonlinearReservoir, ReservoirOutlet
from .types import ConfigurationError, Fluxes, Parameters, State

logger = logging.getLogger(__name__)


class MassBalanceResult(IntEnum):
    """Result code of a timestep."""

    OK = 0
    MASS_BALANCE_ERROR = 100


def _validate_state(state: State, params: Parameters) -> State:
    """Return a copy of state whose cascade storages match nash_n.

    An empty cascade sequence is read as an empty cascade and filled with
    zeros; any other length mismatch is an error. Every storage must lie
    between zero and the ceiling of its reservoir.
    """
    state = state.copy()
    if not np.all(np.isfinite(np.asarray(state))):
        msg = f"State storages must be finite, got {state}"
        raise ConfigurationError(msg)
    if (
        state.soil_storage_meters < 0.0
        or state.groundwater_storage_meters < 0.0
        or np.any(state.nash_cascade_storage_meters < 0.0)
    ):
        msg = f"State storages must be non-negative, got {state}"
        raise ConfigurationError(msg)
    ceilings = {
        "soil": (state.soil_storage_meters, params.max_soil_storage_meters),
        "groundwater": (state.groundwater_storage_meters, params.max_groundwater_storage_meters),
        "Nash cascade": (
            float(np.max(state.nash_cascade_storage_meters, initial=0.0)),
            params.max_soil_storage_meters,
        ),
    }
    for store, (storage, ceiling) in ceilings.items():
        if storage > ceiling:
            msg = f"Initial {store} storage {storage} exceeds the reservoir ceiling {ceiling}"
            raise ConfigurationError(msg)
    if state.nash_n != params.nash_n:
        if state.nash_n == 0:
            state.nash_cascade_storage_meters = np.zeros(params.nash_n, dtype=np.float64)
        else:
            msg = (
                f"Nash cascade size parameter nash_n={params.nash_n} does not match "
                f"the {state.nash_n} cascade storages in the state"
            )
            raise ConfigurationError(msg)
    return state


class TshirtModel:
    """Tshirt conceptual rainfall-runoff model for one spatial unit.

    The model holds exactly two state snapshots: the state the last timestep
    started from and the state it produced. Both are replaced wholesale by
    every call to run(), which must not be made concurrently on one instance.

    Args:
        params: Model parameters.
        initial_state: Starting storages. Defaults to empty stores. The model
            keeps its own copy.

    Raises:
        ConfigurationError: If the state's cascade storages do not match
            params.nash_n, a storage lies outside its reservoir bounds, or the
            soil parameters give no field capacity.
    """

    def __init__(self, params: Parameters, initial_state: State | None = None) -> None:
        self.params = params
        if initial_state is None:
            initial_state = State.initialize(params)

        self.soil_field_capacity_storage = soil_field_capacity_storage(
            params.maxsmc, params.satpsi, params.b, params.alpha_fc
        )
        if not math.isfinite(self.soil_field_capacity_storage):
            msg = (
                f"Soil parameters give no finite field capacity "
                f"(maxsmc={params.maxsmc}, satpsi={params.satpsi}, b={params.b}, alpha_fc={params.alpha_fc})"
            )
            raise ConfigurationError(msg)

        self._current_state = _validate_state(initial_state, params)
        self._previous_state = self._current_state
        self._fluxes: Fluxes | None = None
        self._mass_check_error_bound = MASS_CHECK_ERROR_BOUND

        self.nash_cascade = self._build_nash_cascade()
        self.soil_reservoir = self._build_soil_reservoir()
        self.groundwater_reservoir = self._build_groundwater_reservoir()

        logger.debug(
            "Built Tshirt model with nash_n=%d, Sfc=%.6f m",
            params.nash_n,
            self.soil_field_capacity_storage,
        )

    @classmethod
    def from_storage(
        cls,
        params: Parameters,
        soil_storage: float,
        groundwater_storage: float,
        storage_values_are_ratios: bool = False,
        nash_storage: Sequence[float] | np.ndarray = (),
    ) -> TshirtModel:
        """Build a model from bare initial storage values.

        Args:
            params: Model parameters.
            soil_storage: Initial soil storage, in meters or as a ratio of the maximum.
            groundwater_storage: Initial groundwater storage, in meters or as a ratio.
            storage_values_are_ratios: Interpret the two storages as ratios of
                their maximum storage.
            nash_storage: Initial Nash cascade storages [m]; empty starts the
                cascade from zero.
        """
        state = State.initialize(
            params,
            soil_storage=soil_storage,
            groundwater_storage=groundwater_storage,
            storage_values_are_ratios=storage_values_are_ratios,
            nash_storage=nash_storage,
        )
        return cls(params, state)

    def _build_nash_cascade(self) -> NashCascade:
        return NashCascade(
            self._current_state.nash_cascade_storage_meters,
            kn=self.params.kn,
            max_storage_meters=self.params.max_soil_storage_meters,
            max_velocity=self.params.max_lateral_flow,
        )

    def _build_soil_reservoir(self) -> NonlinearReservoir:
        """Soil reservoir with a lateral flow and a percolation outlet, both active above Sfc."""
        outlets = {
            LATERAL_FLOW_OUTLET_INDEX: ReservoirOutlet.linear(
                self.params.klf, 1.0, self.soil_field_capacity_storage, self.params.max_lateral_flow
            ),
            PERCOLATION_OUTLET_INDEX: ReservoirOutlet.linear(
                self.params.satdk * self.params.slope, 1.0, self.soil_field_capacity_storage, NO_VELOCITY_CAP
            ),
        }
        return NonlinearReservoir(
            0.0,
            self.params.max_soil_storage_meters,
            self._current_state.soil_storage_meters,
            [outlets[index] for index in sorted(outlets)],
        )

    def _build_groundwater_reservoir(self) -> NonlinearReservoir:
        """Groundwater reservoir with a single uncapped exponential outlet."""
        outlet = ReservoirOutlet.exponential(self.params.cgw, self.params.expon, 0.0, NO_VELOCITY_CAP)
        return NonlinearReservoir(
            0.0,
            self.params.max_groundwater_storage_meters,
            self._current_state.groundwater_storage_meters,
            [outlet],
        )

    @property
    def current_state(self) -> State:
        """State produced by the last timestep (the initial state before any run)."""
        return self._current_state

    @property
    def previous_state(self) -> State:
        """State the last timestep started from."""
        return self._previous_state

    @property
    def fluxes(self) -> Fluxes | None:
        """Flux record of the last timestep, None before the first run."""
        return self._fluxes

    @property
    def mass_check_error_bound(self) -> float:
        """Largest tolerated mass balance difference [m]."""
        return self._mass_check_error_bound

    @mass_check_error_bound.setter
    def mass_check_error_bound(self, error_bound: float) -> None:
        self._mass_check_error_bound = abs(float(error_bound))

    def run(
        self,
        dt: float,
        input_flux_meters: float,
        et_model: EvapotranspirationModel | None = None,
    ) -> MassBalanceResult:
        """Advance the model by one timestep.

        The flux record and the new state are kept whatever the outcome of
        the mass balance check.

        Args:
            dt: Timestep size [s].
            input_flux_meters: Water entering the system this timestep [m].
            et_model: Evapotranspiration capability applied to the soil store.
                Defaults to no evapotranspiration.

        Returns:
            MassBalanceResult.OK, or MASS_BALANCE_ERROR when the timestep did
            not conserve mass within mass_check_error_bound.

        Raises:
            ValueError: If dt is not positive.
        """
        if dt <= 0.0:
            msg = f"Timestep must be positive, got dt={dt}"
            raise ValueError(msg)
        if et_model is None:
            et_model = NoEvapotranspiration()

        params = self.params
        self._previous_state = self._current_state
        previous = self._previous_state

        # 1. Schaake partitioning (depths), converted to rates
        soil_moisture_deficit = params.max_soil_storage_meters - previous.soil_storage_meters
        surface_runoff, infiltration = schaake_partitioning(
            dt, params.cschaake, soil_moisture_deficit, input_flux_meters
        )

        # 2. Soil reservoir
        _, soil_excess = self.soil_reservoir.response(infiltration / dt, dt)
        lateral_flow = self.soil_reservoir.velocity_for_outlet(LATERAL_FLOW_OUTLET_INDEX)
        percolation = self.soil_reservoir.velocity_for_outlet(PERCOLATION_OUTLET_INDEX)

        # 3. Evapotranspiration
        routed_soil_storage = self.soil_reservoir.storage_meters
        et_loss = evapotranspiration_loss(routed_soil_storage, et_model)
        # Storage never gains water from ET and stays within the reservoir bounds;
        # an anomalous loss is left in the flux record for the mass check
        self.soil_reservoir.storage_meters = routed_soil_storage - max(et_loss, 0.0)
        soil_storage = self.soil_reservoir.storage_meters

        # 4. Lateral flow through the Nash cascade
        lateral_flow = self.nash_cascade.route(lateral_flow, dt)

        # 5. Groundwater reservoir
        groundwater_flow, groundwater_excess = self.groundwater_reservoir.response(percolation, dt)

        self._current_state = State(
            soil_storage_meters=soil_storage,
            groundwater_storage_meters=self.groundwater_reservoir.storage_meters,
            nash_cascade_storage_meters=self.nash_cascade.storages,
        )
        self._fluxes = Fluxes(
            et_loss_meters=et_loss,
            surface_runoff_meters_per_second=(surface_runoff + soil_excess + groundwater_excess) / dt,
            soil_lateral_flow_meters_per_second=lateral_flow,
            soil_percolation_flow_meters_per_second=percolation,
            groundwater_flow_meters_per_second=groundwater_flow,
        )

        # 6. Mass balance
        return self.mass_check(input_flux_meters, dt)

    def mass_check(self, input_flux_meters: float, dt: float) -> MassBalanceResult:
        """Check that the last timestep conserved mass.

        Compares the storage before the step plus the input with the storage
        after the step plus everything that left the system.

        Args:
            input_flux_meters: Water that entered the system during the step [m].
            dt: Timestep size [s].

        Returns:
            MassBalanceResult.OK or MassBalanceResult.MASS_BALANCE_ERROR.
        """
        if self._fluxes is None:
            return MassBalanceResult.OK

        previous_mass = self._previous_state.total_storage_meters + input_flux_meters
        current_mass = self._current_state.total_storage_meters + self._fluxes.outgoing_volume_meters(dt)

        difference = abs(previous_mass - current_mass)
        if not difference <= self._mass_check_error_bound:
            logger.warning(
                "Mass balance error of %.3e m exceeds bound %.3e m",
                difference,
                self._mass_check_error_bound,
            )
            return MassBalanceResult.MASS_BALANCE_ERROR
        return MassBalanceResult.OK
