from .particles import Particle, Species, EquationOfMotion, RadiationMode, \
    RadiationEvent, PairCreationEvent, emit_photon, create_pair
from .fields import Field, Envelope, Polarization
from .lasers import PlaneWave, FastPlaneWave, FocusedLaser, FastFocusedLaser
from .builder import BeamBuilder

__all__ = [
    "Particle", "Species", "EquationOfMotion", "RadiationMode",
    "RadiationEvent", "PairCreationEvent", "emit_photon", "create_pair",
    "Field", "Envelope", "Polarization",
    "PlaneWave", "FastPlaneWave", "FocusedLaser", "FastFocusedLaser",
    "BeamBuilder",
]
