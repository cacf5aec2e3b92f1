from enum import Enum, auto
from typing import NamedTuple
import numpy as np
from scipy.constants import m_e, e

from .geometry import four_vector, unitize, unpolarized
from .inline import calculate_chi_inline


class Species(Enum):
    """
    Particle species enumeration.

    Values:
        ELECTRON: massive, charge -e
        POSITRON: massive, charge +e
        PHOTON: massless, neutral
    """
    ELECTRON = auto()
    POSITRON = auto()
    PHOTON = auto()

    @property
    def is_massive(self) -> bool:
        return self is not Species.PHOTON

    @property
    def mass(self) -> float:
        return m_e if self.is_massive else 0.0

    @property
    def charge(self) -> float:
        if self is Species.ELECTRON:
            return -e
        if self is Species.POSITRON:
            return e
        return 0.0

    @property
    def charge_to_mass(self) -> float:
        """Charge to mass ratio in C/kg, zero for photons."""
        if not self.is_massive:
            return 0.0
        return self.charge / self.mass


class EquationOfMotion(Enum):
    """
    Equation of motion used in the particle push.

    Values:
        LORENTZ: Lorentz force only, no radiation reaction
        LANDAU_LIFSHITZ: Landau-Lifshitz drag for gamma >> 1
        MODIFIED_LANDAU_LIFSHITZ: Landau-Lifshitz drag suppressed by the quantum Gaunt factor
    """
    LORENTZ = auto()
    LANDAU_LIFSHITZ = auto()
    MODIFIED_LANDAU_LIFSHITZ = auto()

    @property
    def includes_rr(self) -> bool:
        return self is not EquationOfMotion.LORENTZ


class RadiationMode(Enum):
    """
    Values:
        QUANTUM: photon emission sampled as discrete events
        CLASSICAL: emission as continuous energy loss in the push, no events
    """
    QUANTUM = auto()
    CLASSICAL = auto()


class Particle(NamedTuple):
    """
    Kinematic state of a single electron, positron or photon.

    Attributes:
        species: Species of the particle
        r: four-position (ct, x, y, z) in m
        u: normalized four-momentum p/(m_e c)
        pol: Stokes vector (photons only, unpolarized otherwise)
        weight: number of real particles represented
        id: identifier of this particle
        parent_id: identifier of the particle this one was created by
    """
    species: Species
    r: np.ndarray
    u: np.ndarray
    pol: np.ndarray
    weight: float = 1.0
    id: int = 0
    parent_id: int = 0

    @classmethod
    def create(cls, species: Species, r: np.ndarray) -> 'Particle':
        """
        Particle at `r`, at rest if massive. Photons must be given a
        momentum with `with_momentum` before they are pushed.
        """
        if species.is_massive:
            u = four_vector(1.0, 0.0, 0.0, 0.0)
        else:
            u = four_vector(0.0, 0.0, 0.0, 0.0)
        return cls(species, np.asarray(r, dtype=np.float64), u, unpolarized())

    def with_position(self, r: np.ndarray) -> 'Particle':
        return self._replace(r=r)

    def with_momentum(self, u: np.ndarray) -> 'Particle':
        return self._replace(u=u)

    def with_normalized_momentum(self, u: np.ndarray) -> 'Particle':
        return self._replace(u=u)

    def with_polarization(self, pol: np.ndarray) -> 'Particle':
        return self._replace(pol=pol)

    def with_weight(self, weight: float) -> 'Particle':
        return self._replace(weight=weight)

    def with_id(self, id: int) -> 'Particle':
        return self._replace(id=id)

    def with_parent_id(self, parent_id: int) -> 'Particle':
        return self._replace(parent_id=parent_id)

    @property
    def gamma(self) -> float:
        """Lorentz factor, or energy in units of m_e c^2 for photons."""
        return self.u[0]

    def chi(self, E: np.ndarray, B: np.ndarray) -> float:
        """Quantum parameter of the particle in fields `E` [V/m] and `B` [T]."""
        return calculate_chi_inline(
            E[0], E[1], E[2], B[0], B[1], B[2],
            self.u[1], self.u[2], self.u[3], 1.0 / self.u[0],
        )


class RadiationEvent(NamedTuple):
    """
    Attributes:
        k: normalized four-momentum of the emitted photon
        u_prime: normalized four-momentum of the recoiling electron/positron
        pol: Stokes vector of the emitted photon
        a_eff: normalized amplitude of the field at emission
        chi: quantum parameter of the parent particle
        absorption: energy absorbed from the field, in units of m_e c^2
    """
    k: np.ndarray
    u_prime: np.ndarray
    pol: np.ndarray
    a_eff: float
    chi: float
    absorption: float


class PairCreationEvent(NamedTuple):
    """
    Attributes:
        u_e: normalized four-momentum of the electron
        u_p: normalized four-momentum of the positron
        frac: fraction of the parent photon that has decayed
        a_eff: normalized amplitude of the field at creation
        chi: quantum parameter of the parent photon
        absorption: energy absorbed from the field, in units of m_e c^2
    """
    u_e: np.ndarray
    u_p: np.ndarray
    frac: float
    a_eff: float
    chi: float
    absorption: float


def emit_photon(parent: Particle, event: RadiationEvent, id: int) -> tuple:
    """
    Apply a radiation event to its parent.

    Returns
    -------
    (recoiled parent, photon) : the photon is created at the parent's
    position with the parent's weight and `parent_id` set to the parent's id.
    """
    assert parent.species.is_massive, 'photon cannot radiate photon'
    photon = Particle(
        Species.PHOTON, parent.r.copy(), event.k, event.pol,
        weight=parent.weight, id=id, parent_id=parent.id,
    )
    return parent.with_momentum(event.u_prime), photon


def create_pair(photon: Particle, event: PairCreationEvent, ids: tuple) -> tuple:
    """
    Split a photon into an electron-positron pair.

    The children carry `frac` of the photon's weight; the photon keeps the
    remainder, which is zero unless the pair creation rate was increased.

    Returns
    -------
    (photon, electron, positron)
    """
    assert photon.species is Species.PHOTON, 'massive particle cannot create BW pair'
    weight = event.frac * photon.weight
    electron = Particle(
        Species.ELECTRON, photon.r.copy(), unitize(event.u_e), unpolarized(),
        weight=weight, id=ids[0], parent_id=photon.id,
    )
    positron = Particle(
        Species.POSITRON, photon.r.copy(), unitize(event.u_p), unpolarized(),
        weight=weight, id=ids[1], parent_id=photon.id,
    )
    return photon.with_weight(photon.weight - weight), electron, positron
