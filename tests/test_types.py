"""Tests for Tshirt parameters, state and flux types."""

import logging
from dataclasses import FrozenInstanceError, replace

import numpy as np
import pytest

from tshirt import ConfigurationError, Fluxes, Parameters, State
from tshirt.constants import PARAM_NAMES, compute_state_size


class TestParameters:
    """Tests for the Parameters dataclass."""

    def test_derived_defaults(self, scenario_params: Parameters) -> None:
        """Lateral flow cap and Schaake coefficient are derived from satdk."""
        assert scenario_params.max_lateral_flow == pytest.approx(0.00000338)
        assert scenario_params.cschaake == pytest.approx(3.0 * 0.00000338 / 2.0e-6)

    def test_explicit_values_kept(self, scenario_params: Parameters) -> None:
        params = replace(scenario_params, max_lateral_flow=1.0e-4, cschaake=0.5)
        assert params.max_lateral_flow == 1.0e-4
        assert params.cschaake == 0.5

    def test_multiplier_scales_lateral_flow_cap(self, scenario_params: Parameters) -> None:
        params = replace(scenario_params, multiplier=10.0, max_lateral_flow=None)
        assert params.max_lateral_flow == pytest.approx(0.0000338)

    def test_is_frozen(self, scenario_params: Parameters) -> None:
        with pytest.raises(FrozenInstanceError):
            scenario_params.klf = 0.5  # type: ignore[misc]

    @pytest.mark.parametrize("b", [1.0, 0.5])
    def test_rejects_b_not_above_one(self, scenario_params: Parameters, b: float) -> None:
        with pytest.raises(ConfigurationError, match="b must be greater than 1"):
            replace(scenario_params, b=b)

    @pytest.mark.parametrize("name", ["satdk", "klf", "kn", "cgw", "slope", "wltsmc"])
    def test_rejects_negative_values(self, scenario_params: Parameters, name: str) -> None:
        with pytest.raises(ConfigurationError, match=name):
            replace(scenario_params, **{name: -0.1})

    @pytest.mark.parametrize("name", ["klf", "b", "cgw", "max_groundwater_storage_meters", "cschaake"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_rejects_non_finite_values(self, scenario_params: Parameters, name: str, value: float) -> None:
        with pytest.raises(ConfigurationError, match=f"{name} must be finite"):
            replace(scenario_params, **{name: value})

    @pytest.mark.parametrize("nash_n", [-1, 1.5, True])
    def test_rejects_invalid_nash_n(self, scenario_params: Parameters, nash_n: object) -> None:
        with pytest.raises(ConfigurationError, match="nash_n"):
            replace(scenario_params, nash_n=nash_n)

    def test_rejects_zero_max_storage(self, scenario_params: Parameters) -> None:
        with pytest.raises(ConfigurationError, match="max_soil_storage_meters"):
            replace(scenario_params, max_soil_storage_meters=0.0)

    def test_configuration_error_is_value_error(self) -> None:
        assert issubclass(ConfigurationError, ValueError)

    def test_warns_outside_typical_range(
        self, scenario_params: Parameters, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Out-of-range values are accepted with a warning."""
        with caplog.at_level(logging.WARNING, logger="tshirt.types"):
            params = replace(scenario_params, maxsmc=0.9)

        assert params.maxsmc == 0.9
        assert any("maxsmc" in record.getMessage() for record in caplog.records)

    def test_no_warning_for_typical_values(
        self, scenario_params: Parameters, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="tshirt.types"):
            replace(scenario_params)
        assert not caplog.records

    def test_wilting_point_storage(self, scenario_params: Parameters) -> None:
        """Wilting point storage scales with the soil column."""
        params = replace(scenario_params, wltsmc=0.0439, max_soil_storage_meters=2.0)
        assert params.wilting_point_storage_meters == pytest.approx(0.2)

    def test_array_round_trip(self, scenario_params: Parameters) -> None:
        arr = np.asarray(scenario_params)

        assert arr.shape == (len(PARAM_NAMES),)
        assert arr.dtype == np.float64
        assert Parameters.from_array(arr) == scenario_params

    def test_from_array_restores_integer_nash_n(self, scenario_params: Parameters) -> None:
        restored = Parameters.from_array(np.asarray(scenario_params))
        assert restored.nash_n == 2
        assert isinstance(restored.nash_n, int)


class TestState:
    """Tests for the State dataclass."""

    def test_initialize_empty(self, scenario_params: Parameters) -> None:
        state = State.initialize(scenario_params)

        assert state.soil_storage_meters == 0.0
        assert state.groundwater_storage_meters == 0.0
        np.testing.assert_array_equal(state.nash_cascade_storage_meters, np.zeros(2))

    def test_initialize_from_ratios(self, scenario_params: Parameters) -> None:
        """Ratios are multiplied by the matching maximum storage."""
        params = replace(scenario_params, max_soil_storage_meters=2.0, max_groundwater_storage_meters=4.0)
        state = State.initialize(params, 0.5, 0.25, storage_values_are_ratios=True)

        assert state.soil_storage_meters == pytest.approx(1.0)
        assert state.groundwater_storage_meters == pytest.approx(1.0)

    def test_initialize_absolute(self, scenario_params: Parameters) -> None:
        state = State.initialize(scenario_params, 0.3, 0.2, nash_storage=[0.01, 0.02])

        assert state.soil_storage_meters == 0.3
        assert state.groundwater_storage_meters == 0.2
        np.testing.assert_allclose(state.nash_cascade_storage_meters, [0.01, 0.02])

    def test_total_storage(self) -> None:
        state = State(0.3, 0.2, np.array([0.01, 0.02]))
        assert state.total_storage_meters == pytest.approx(0.53)

    def test_copy_is_independent(self) -> None:
        state = State(0.3, 0.2, np.array([0.01, 0.02]))
        snapshot = state.copy()

        state.nash_cascade_storage_meters[0] = 0.5
        state.soil_storage_meters = 0.0

        assert snapshot.soil_storage_meters == 0.3
        assert snapshot.nash_cascade_storage_meters[0] == 0.01

    def test_array_round_trip(self) -> None:
        state = State(0.3, 0.2, [0.01, 0.02, 0.03])
        arr = np.asarray(state)

        assert arr.shape == (compute_state_size(3),)
        restored = State.from_array(arr, nash_n=3)
        assert restored.soil_storage_meters == 0.3
        assert restored.groundwater_storage_meters == 0.2
        np.testing.assert_array_equal(restored.nash_cascade_storage_meters, [0.01, 0.02, 0.03])

    def test_cascade_coerced_to_array(self) -> None:
        state = State(0.1, 0.1, [0.0, 0.5])
        assert isinstance(state.nash_cascade_storage_meters, np.ndarray)
        assert state.nash_n == 2


class TestFluxes:
    """Tests for the Fluxes record."""

    def test_defaults_to_zero(self) -> None:
        assert all(value == 0.0 for value in Fluxes().to_dict().values())

    def test_outgoing_volume_excludes_percolation(self) -> None:
        """Percolation stays in the system and is not counted as outflow."""
        fluxes = Fluxes(
            et_loss_meters=0.001,
            surface_runoff_meters_per_second=1.0e-6,
            soil_lateral_flow_meters_per_second=2.0e-6,
            soil_percolation_flow_meters_per_second=5.0e-6,
            groundwater_flow_meters_per_second=3.0e-6,
        )
        assert fluxes.outgoing_volume_meters(1000.0) == pytest.approx(0.001 + 0.006)

    def test_to_dict_keys(self) -> None:
        assert list(Fluxes().to_dict()) == [
            "et_loss_meters",
            "surface_runoff_meters_per_second",
            "soil_lateral_flow_meters_per_second",
            "soil_percolation_flow_meters_per_second",
            "groundwater_flow_meters_per_second",
        ]
