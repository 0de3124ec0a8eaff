"""Shared fixtures for the Tshirt test suite."""

import pytest

from tshirt import Parameters


@pytest.fixture
def scenario_params() -> Parameters:
    """Brooks-Corey style test parameters with a two-reservoir cascade."""
    return Parameters(
        maxsmc=0.439,
        satdk=0.00000338,
        satpsi=0.355,
        b=4.05,
        slope=0.01,
        alpha_fc=1.0,
        klf=0.01,
        kn=0.03,
        nash_n=2,
        cgw=0.01,
        expon=6.0,
        max_soil_storage_meters=1.0,
        max_groundwater_storage_meters=1.0,
    )


@pytest.fixture
def no_cascade_params() -> Parameters:
    """Same soil and groundwater as scenario_params, without a Nash cascade."""
    return Parameters(
        maxsmc=0.439,
        satdk=0.00000338,
        satpsi=0.355,
        b=4.05,
        slope=0.01,
        alpha_fc=1.0,
        klf=0.01,
        kn=0.03,
        nash_n=0,
        cgw=0.01,
        expon=6.0,
        max_soil_storage_meters=1.0,
        max_groundwater_storage_meters=1.0,
    )
