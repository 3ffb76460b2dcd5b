import math

# =============================================================================
# SECTION 1: PHYSICAL CONSTANTS
# =============================================================================
# These values should not be changed unless you have good reason.

# Fundamental constants
MU0 = 4 * math.pi * 1e-7            # Permeability of free space (H/m)
EPSILON0 = 8.8541878128e-12         # Permittivity of free space (F/m)
C_LIGHT = 299_792_458.0             # Speed of light (m/s)
E_CHARGE = 1.602176634e-19          # Elementary charge (C)
M_ELECTRON = 9.1093837015e-31       # Electron mass (kg)
M_PROTON = 1.67262192369e-27        # Proton mass (kg)
K_BOLTZMANN = 1.380649e-23          # Boltzmann constant (J/K)
G_NEWTON = 6.67430e-11              # Gravitational constant (m³/kg·s²)

# Electrolyte
SALT_CONDUCTIVITY = 5.0             # Conductivity gain per mol/L of dissolved salt (S/m)


# =============================================================================
# SECTION 2: MODEL CONSTANTS
# =============================================================================

# Earth-Moon system
LUNAR_DISTANCE_MEAN_KM = 384_400.0  # Mean Earth-Moon distance (km)
LUNAR_PERIGEE_KM = 356_500.0        # Closest approach (km)
LUNAR_APOGEE_KM = 406_700.0         # Farthest distance (km)
LUNAR_MAGNETIC_FIELD = 50e-9        # Lunar stream field at mean distance (T)

# Coupling gains
SOLAR_DENSITY_GAIN = 0.3            # Density boost per unit solar coupling
LUNAR_DENSITY_GAIN = 1e6            # Density boost per tesla of lunar coupling
LUNAR_COMPRESSION_GAIN = 1e8        # Field compression per tesla of lunar coupling
LUNAR_PINCH_GAIN = 0.05             # Z-pinch boost at full lunar alignment
LUNAR_GRAVITY_GAIN = 0.1            # Gravity modulation at full lunar alignment

# Voltage amplification gains
SALT_VOLTAGE_GAIN = 2.0             # per mol/L
ROTATION_VOLTAGE_GAIN = 0.5         # per rad/s
BIOELECTRIC_VOLTAGE_GAIN = 0.001    # per V/m
LUNAR_VOLTAGE_GAIN = 0.1            # at full alignment
SOLAR_VOLTAGE_GAIN = 0.2            # per unit solar coupling

# Plasma conductivity normalization (collision frequency proxy, 1/s)
CONDUCTIVITY_NORMALIZATION = 1e6


# =============================================================================
# SECTION 3: DISPLAY UNITS
# =============================================================================
# Internal computation is SI throughout. Only the published results are scaled.

DEBYE_DISPLAY_SCALE = 1e6           # m -> µm
FREQUENCY_DISPLAY_SCALE = 1e-9      # rad/s -> G(rad/s), shown as "GHz"
DENSITY_DISPLAY_SCALE = 1e-15       # m⁻³ -> ×10¹⁵ m⁻³
GRAVITY_DISPLAY_SCALE = 1.0 / G_NEWTON  # m³/kg·s² -> multiples of G
