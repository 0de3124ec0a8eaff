"""Tshirt core process functions.

Numba-compiled scalar functions implementing the Schaake infiltration
partitioning, the reservoir outlet discharge laws and the soil field capacity.
All inputs and outputs are floats in SI units (meters, seconds).
"""

import math

from numba import njit

from .constants import (
    FIELD_CAPACITY_HEAD_OFFSET,
    FIELD_CAPACITY_INTEGRATION_SPAN,
    MAX_EXP_ARG,
    SECONDS_PER_DAY,
    STANDARD_ATMOSPHERIC_PRESSURE_PASCALS,
    WATER_SPECIFIC_WEIGHT,
)


@njit(cache=True)
def schaake_partitioning(
    dt: float, cschaake: float, soil_moisture_deficit_meters: float, input_flux_meters: float
) -> tuple[float, float]:
    """Partition input water into surface runoff and infiltration.

    Uses the scheme of Schaake et al. (1996). The infiltration capacity of the
    timestep grows with the soil moisture deficit as an exponential saturation
    of the timestep-scaled coefficient:

        Ic = deficit * (1 - exp(-cschaake * dt_days))
        infiltration = P * Ic / (P + Ic)

    so infiltration never exceeds the input nor the capacity.

    Args:
        dt: Timestep size [s].
        cschaake: Schaake coefficient, adjusted for soil type [1/day].
        soil_moisture_deficit_meters: Room left in the soil column [m].
        input_flux_meters: Water reaching the soil surface this timestep [m].

    Returns:
        Tuple of (surface_runoff, infiltration), both in meters.
    """
    if input_flux_meters <= 0.0:
        return 0.0, 0.0
    if soil_moisture_deficit_meters <= 0.0:
        return input_flux_meters, 0.0

    timestep_days = dt / SECONDS_PER_DAY
    capacity = soil_moisture_deficit_meters * (1.0 - math.exp(-cschaake * timestep_days))
    infiltration = input_flux_meters * (capacity / (input_flux_meters + capacity))

    surface_runoff = input_flux_meters - infiltration
    if surface_runoff < 0.0:
        surface_runoff = 0.0
    infiltration = input_flux_meters - surface_runoff

    return surface_runoff, infiltration


@njit(cache=True)
def linear_outlet_velocity(
    storage_meters: float, coefficient: float, exponent: float, activation_threshold_meters: float
) -> float:
    """Compute discharge from a threshold-activated power-law outlet.

    Q = coefficient * (S - threshold)^exponent, zero at or below the threshold.

    Args:
        storage_meters: Current reservoir storage [m].
        coefficient: Outlet coefficient.
        exponent: Power applied to the storage above the threshold [-].
        activation_threshold_meters: Storage below which the outlet is dry [m].

    Returns:
        Unclamped discharge velocity [m/s].
    """
    above = storage_meters - activation_threshold_meters
    if above <= 0.0:
        return 0.0
    return coefficient * above**exponent


@njit(cache=True)
def exponential_outlet_velocity(
    storage_meters: float,
    max_storage_meters: float,
    coefficient: float,
    expansion_factor: float,
    activation_threshold_meters: float,
) -> float:
    """Compute discharge from an exponential outlet.

    Q = coefficient * (exp(expansion_factor * S / S_max) - 1)

    Args:
        storage_meters: Current reservoir storage [m].
        max_storage_meters: Reservoir storage ceiling [m].
        coefficient: Outlet coefficient [m/s].
        expansion_factor: Exponent scaling of the storage ratio [-].
        activation_threshold_meters: Storage below which the outlet is dry [m].

    Returns:
        Unclamped discharge velocity [m/s].
    """
    if storage_meters <= activation_threshold_meters or max_storage_meters <= 0.0:
        return 0.0
    arg = min(expansion_factor * storage_meters / max_storage_meters, MAX_EXP_ARG)
    return coefficient * (math.exp(arg) - 1.0)


@njit(cache=True)
def soil_field_capacity_storage(maxsmc: float, satpsi: float, b: float, alpha_fc: float) -> float:
    """Compute the soil storage at which free gravity drainage stops (Sfc).

    Integrates the Brooks-Corey water retention curve between the suction head
    above the water table less half a meter (z1) and two meters above it (z2):

        Sfc = maxsmc * (1/satpsi)^(-1/b) * b/(b-1) * (z2^((b-1)/b) - z1^((b-1)/b))

    Args:
        maxsmc: Saturated soil moisture content [m3/m3].
        satpsi: Saturated soil matric potential [m].
        b: Brooks-Corey pore size index [-], greater than 1.
        alpha_fc: Scaling of the atmospheric suction head [-].

    Returns:
        Field capacity storage [m].
    """
    head_above_water_table = alpha_fc * (STANDARD_ATMOSPHERIC_PRESSURE_PASCALS / WATER_SPECIFIC_WEIGHT)
    z1 = head_above_water_table - FIELD_CAPACITY_HEAD_OFFSET
    z2 = z1 + FIELD_CAPACITY_INTEGRATION_SPAN

    power = (b - 1.0) / b
    integral = b / (b - 1.0) * (z2**power - z1**power)
    return maxsmc * (1.0 / satpsi) ** (-1.0 / b) * integral
