"""Physical, atmospheric and golf-ball constants for flight calculations.

This module defines the scientific constants used by the force model and the
atmosphere derivation. All values are SI unless noted otherwise.

Constant Categories:
    - ISA constants: Standard sea-level conditions and the barometric formula
    - Gas constants: Dry air and water vapour
    - Viscosity constants: Sutherland's law and Wilke mixing
    - Golf ball constants: Regulation ball and reference coefficients
    - Optimizer bounds: Launch parameter search space

References:
    - ISA: https://www.engineeringtoolbox.com/international-standard-atmosphere-d_985.html
    - Buck (1981), New equations for computing vapor pressure and enhancement factor
    - Wilke (1950), A viscosity equation for gas mixtures
"""

# Third-party imports
from typing_extensions import Final

# =============================================================================
# ISA Constants (International Standard Atmosphere)
# =============================================================================

cStandardTemperatureC: Final[float] = 15.0  # °C
"""Standard temperature at sea level in Celsius (°C)"""

cStandardPressure: Final[float] = 101325.0  # Pa
"""Standard atmospheric pressure at sea level (Pa)"""

cStandardHumidity: Final[float] = 0.5  # fraction
"""Default relative humidity used by Environment (fraction)"""

cLapseRate: Final[float] = 0.0065  # K/m
"""Temperature lapse rate of the troposphere (K/m)"""

cStandardTemperatureK: Final[float] = 288.15  # K
"""Standard temperature at sea level in Kelvin (K)"""

cPressureExponent: Final[float] = 5.255876  # =g*M/R*L
"""Pressure exponent constant for barometric formula (dimensionless)"""

cDegreesCtoK: Final[float] = 273.15
"""Conversion offset from Celsius to Kelvin"""

cGravityConstant: Final[float] = 9.81  # m/s²
"""Gravitational acceleration (m/s²)"""

# =============================================================================
# Gas Constants
# =============================================================================

cGasConstantDryAir: Final[float] = 287.058  # J/(kg·K)
cGasConstantVapor: Final[float] = 461.495  # J/(kg·K)
cMolarMassDryAir: Final[float] = 28.966  # g/mol
cMolarMassVapor: Final[float] = 18.015  # g/mol

# =============================================================================
# Viscosity Constants
# =============================================================================

cSutherlandReferenceViscosity: Final[float] = 1.716e-5  # Pa·s at cSutherlandReferenceTemperature
cSutherlandReferenceTemperature: Final[float] = 273.15  # K
cSutherlandConstantAir: Final[float] = 110.4  # K
cVaporReferenceViscosity: Final[float] = 1.12e-5  # Pa·s at cSutherlandReferenceTemperature
cSutherlandConstantVapor: Final[float] = 103.3  # K

# =============================================================================
# Golf Ball Constants
# =============================================================================

cBallMass: Final[float] = 0.04593  # kg, regulation maximum
cBallRadius: Final[float] = 0.02135  # m, regulation minimum diameter 42.67 mm
cDragCoefficient: Final[float] = 0.225
cLiftCoefficient: Final[float] = 0.13
cMagnusCoefficient: Final[float] = 0.12
cSpinDecayRate: Final[float] = 0.05  # 1/s

# =============================================================================
# Optimizer Bounds
# =============================================================================

cMinLaunchAngle: Final[float] = 0.0  # degrees
cMaxLaunchAngle: Final[float] = 45.0  # degrees
cMinSpinRate: Final[float] = 1000.0  # rpm
cMaxSpinRate: Final[float] = 5000.0  # rpm

__all__ = (
    'cStandardTemperatureC',
    'cStandardPressure',
    'cStandardHumidity',
    'cLapseRate',
    'cStandardTemperatureK',
    'cPressureExponent',
    'cDegreesCtoK',
    'cGravityConstant',
    'cGasConstantDryAir',
    'cGasConstantVapor',
    'cMolarMassDryAir',
    'cMolarMassVapor',
    'cSutherlandReferenceViscosity',
    'cSutherlandReferenceTemperature',
    'cSutherlandConstantAir',
    'cVaporReferenceViscosity',
    'cSutherlandConstantVapor',
    'cBallMass',
    'cBallRadius',
    'cDragCoefficient',
    'cLiftCoefficient',
    'cMagnusCoefficient',
    'cSpinDecayRate',
    'cMinLaunchAngle',
    'cMaxLaunchAngle',
    'cMinSpinRate',
    'cMaxSpinRate',
)
