"""Tshirt numerical and physical constants.

These are fixed values used throughout the Tshirt model computations.
Includes physical constants for the field capacity calculation, parameter
bounds based on typical literature values, and state layout helpers.
"""

# Model parameter names in canonical order
PARAM_NAMES: tuple[str, ...] = (
    "maxsmc",
    "satdk",
    "satpsi",
    "b",
    "slope",
    "alpha_fc",
    "klf",
    "kn",
    "nash_n",
    "cgw",
    "expon",
    "max_soil_storage_meters",
    "max_groundwater_storage_meters",
    "wltsmc",
    "multiplier",
    "max_lateral_flow",
    "cschaake",
)

# Typical parameter ranges, used for warnings only
DEFAULT_BOUNDS: dict[str, tuple[float, float]] = {
    "maxsmc": (0.2, 0.7),  # Porosity [m3/m3]
    "satdk": (1.0e-7, 1.0e-4),  # Saturated hydraulic conductivity [m/s]
    "satpsi": (0.01, 1.0),  # Saturated soil matric potential [m]
    "b": (1.5, 15.0),  # Brooks-Corey pore size index [-]
    "slope": (0.0, 1.0),  # Linear scaling of percolation [-]
    "alpha_fc": (0.1, 1.0),  # Field capacity suction scaling [-]
    "klf": (0.0, 1.0),  # Lateral flow coefficient [1/s]
    "kn": (0.0, 1.0),  # Nash cascade coefficient [1/s]
    "nash_n": (0.0, 10.0),  # Number of Nash reservoirs [-]
    "cgw": (0.0, 1.0),  # Groundwater outlet coefficient [m/s]
    "expon": (1.0, 8.0),  # Groundwater exponent [-]
}

# Field capacity calculation
STANDARD_ATMOSPHERIC_PRESSURE_PASCALS: float = 101325.0
WATER_SPECIFIC_WEIGHT: float = 9810.0  # [N/m3]
FIELD_CAPACITY_HEAD_OFFSET: float = 0.5  # [m]
FIELD_CAPACITY_INTEGRATION_SPAN: float = 2.0  # [m]

# Schaake partitioning
SECONDS_PER_DAY: float = 86400.0
REFKDT: float = 3.0  # Schaake surface runoff parameter [-]
REF_SATDK: float = 2.0e-6  # Reference saturated conductivity [m/s]

# Guard on exp() arguments for the exponential outlet
MAX_EXP_ARG: float = 100.0

# Mass balance tolerance [m]
MASS_CHECK_ERROR_BOUND: float = 1.0e-6

# Soil reservoir outlet indices
LATERAL_FLOW_OUTLET_INDEX: int = 0
PERCOLATION_OUTLET_INDEX: int = 1

# State size constants
LUMPED_STATE_SIZE: int = 2  # soil storage, groundwater storage


def compute_state_size(nash_n: int = 0) -> int:
    """Compute total state size for a given Nash cascade length.

    State layout: [soil_storage, groundwater_storage, nash_storages (nash_n)]
    """
    return LUMPED_STATE_SIZE + nash_n
