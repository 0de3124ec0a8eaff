"""Tshirt conceptual rainfall-runoff model.

Partitions the water input of each timestep into surface runoff, soil
lateral flow routed through a Nash cascade, percolation to an exponential
groundwater reservoir, and evapotranspiration, checking mass balance at
every step.
"""

from .evapotranspiration import (
    BudykoEvapotranspiration,
    EvapotranspirationModel,
    NoEvapotranspiration,
    evapotranspiration_loss,
)
from .inputs import ForcingData
from .model import MassBalanceResult, TshirtModel
from .nash_cascade import NashCascade
from .outputs import ModelOutput, TshirtFluxes
from .processes import schaake_partitioning, soil_field_capacity_storage
from .reservoir import NO_VELOCITY_CAP, NonlinearReservoir, OutletKind, ReservoirOutlet
from .simulation import run
from .types import ConfigurationError, Fluxes, Parameters, State

__all__ = [
    "NO_VELOCITY_CAP",
    "BudykoEvapotranspiration",
    "ConfigurationError",
    "EvapotranspirationModel",
    "Fluxes",
    "ForcingData",
    "MassBalanceResult",
    "ModelOutput",
    "NashCascade",
    "NoEvapotranspiration",
    "NonlinearReservoir",
    "OutletKind",
    "Parameters",
    "ReservoirOutlet",
    "State",
    "TshirtFluxes",
    "TshirtModel",
    "evapotranspiration_loss",
    "run",
    "schaake_partitioning",
    "soil_field_capacity_storage",
]
