"""Tests for the ForcingData input container.

Tests cover validation, immutability, and type coercion of the forcing
series used to drive the Tshirt model.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from tshirt import ForcingData


def _make_hours(n: int, start: str = "2020-01-01T00") -> np.ndarray:
    """Create a datetime64 array with n hours starting from the given time."""
    return np.datetime64(start, "h") + np.arange(n) * np.timedelta64(1, "h")


class TestForcingData:
    """Tests for the ForcingData validated Pydantic model."""

    def test_creates_with_valid_arrays(self) -> None:
        forcing = ForcingData(
            time=_make_hours(5),
            input_flux=np.array([1.0e-4, 0.0, 2.0e-3, 0.0, 5.0e-4]),
            pet=np.array([1.0e-4, 1.0e-4, 0.0, 0.0, 2.0e-4]),
        )

        assert len(forcing) == 5
        assert forcing.timestep_seconds == 3600.0

    def test_pet_optional(self) -> None:
        forcing = ForcingData(time=_make_hours(3), input_flux=np.zeros(3))
        assert forcing.pet is None

    def test_coerces_to_float64(self) -> None:
        """Integer and list inputs are coerced to float64 arrays."""
        forcing = ForcingData(time=_make_hours(3), input_flux=[0, 1, 2], pet=np.array([0, 0, 1], dtype=np.int32))

        assert forcing.input_flux.dtype == np.float64
        assert forcing.pet is not None
        assert forcing.pet.dtype == np.float64

    def test_coerces_time_to_datetime64(self) -> None:
        forcing = ForcingData(time=_make_hours(2), input_flux=np.zeros(2))
        assert forcing.time.dtype == np.dtype("datetime64[ns]")

    def test_daily_timestep(self) -> None:
        """A daily series is accepted with a matching timestep."""
        time = np.arange("2020-01-01", "2020-01-11", dtype="datetime64[D]")
        forcing = ForcingData(time=time, input_flux=np.zeros(10), timestep_seconds=86400.0)
        assert len(forcing) == 10

    def test_single_step_skips_spacing_check(self) -> None:
        forcing = ForcingData(time=_make_hours(1), input_flux=[1.0e-3], timestep_seconds=900.0)
        assert len(forcing) == 1

    def test_is_frozen(self) -> None:
        forcing = ForcingData(time=_make_hours(2), input_flux=np.zeros(2))
        with pytest.raises(ValidationError):
            forcing.timestep_seconds = 60.0  # type: ignore[misc]

    @pytest.mark.parametrize("field", ["input_flux", "pet"])
    def test_rejects_nan(self, field: str) -> None:
        values = {"input_flux": np.zeros(3), "pet": np.zeros(3)}
        values[field] = np.array([0.0, np.nan, 0.0])

        with pytest.raises(ValidationError, match="NaN"):
            ForcingData(time=_make_hours(3), **values)

    @pytest.mark.parametrize("field", ["input_flux", "pet"])
    def test_rejects_negative(self, field: str) -> None:
        values = {"input_flux": np.zeros(3), "pet": np.zeros(3)}
        values[field] = np.array([0.0, -1.0e-4, 0.0])

        with pytest.raises(ValidationError, match="negative"):
            ForcingData(time=_make_hours(3), **values)

    def test_rejects_2d_arrays(self) -> None:
        with pytest.raises(ValidationError, match="1D"):
            ForcingData(time=_make_hours(4), input_flux=np.zeros((2, 2)))

    def test_rejects_mismatched_lengths(self) -> None:
        with pytest.raises(ValidationError, match="does not match time length"):
            ForcingData(time=_make_hours(4), input_flux=np.zeros(3))

    def test_rejects_mismatched_pet_length(self) -> None:
        with pytest.raises(ValidationError, match="pet length"):
            ForcingData(time=_make_hours(4), input_flux=np.zeros(4), pet=np.zeros(5))

    @pytest.mark.parametrize("timestep_seconds", [0.0, -3600.0])
    def test_rejects_non_positive_timestep(self, timestep_seconds: float) -> None:
        with pytest.raises(ValidationError, match="timestep_seconds must be positive"):
            ForcingData(time=_make_hours(1), input_flux=np.zeros(1), timestep_seconds=timestep_seconds)

    def test_rejects_inconsistent_spacing(self) -> None:
        """An hourly series cannot be run with a daily timestep."""
        with pytest.raises(ValidationError, match="Time spacing"):
            ForcingData(time=_make_hours(24), input_flux=np.zeros(24), timestep_seconds=86400.0)
