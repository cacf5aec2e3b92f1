from math import sqrt, sin, cos, pi, inf
from typing import NamedTuple, Optional, Union

import numpy as np
from numpy.random import Generator

from .geometry import four_vector, three_vector, unitize, lightlike, \
    rotate_around_y, rotate_around_z
from .particles import Particle, Species


class UniformDisk(NamedTuple):
    r_max: float

    def sample(self, rng: Generator):
        r = self.r_max * sqrt(rng.random())
        theta = 2 * pi * rng.random()
        return r * cos(theta), r * sin(theta)


class NormalXY(NamedTuple):
    sigma_x: float
    sigma_y: float

    def sample(self, rng: Generator):
        return self.sigma_x * rng.standard_normal(), self.sigma_y * rng.standard_normal()


class TruncNormalXY(NamedTuple):
    '''normal distribution cut at |x| = x_max and |y| = y_max'''
    sigma_x: float
    sigma_y: float
    x_max: float
    y_max: float

    def sample(self, rng: Generator):
        while True:
            x = self.sigma_x * rng.standard_normal()
            if abs(x) <= self.x_max:
                break
        while True:
            y = self.sigma_y * rng.standard_normal()
            if abs(y) <= self.y_max:
                break
        return x, y


TransverseDistribution = Union[UniformDisk, NormalXY, TruncNormalXY]


class BeamBuilder(NamedTuple):
    """
    Initial conditions of a beam of `num` particles travelling towards -z.

    Every `with_*` method returns a modified copy. One energy spectrum,
    `with_normal_energy_spectrum` or `with_bremsstrahlung_spectrum`, has to
    be chosen before `build`.

    Attributes:
        species: Species of the particles
        num: number of particles
        weight: weight of each particle
        normal_espec: True for a normal, False for a bremsstrahlung spectrum
        gamma, sigma: mean and standard deviation of the normal spectrum
        gamma_min, gamma_max: bounds of the bremsstrahlung spectrum
        transverse: distribution of (x, y)
        sigma_z: rms length in m
        energy_chirp: correlation coefficient between z and energy
        angle: collision angle in rad, rotation about y
        collision_plane_angle: rotation about z in rad
        rms_div: rms divergence in rad
        initial_z: distance of the beam centre from the focus in m
        offset: displacement (x, y, z) of the beam centre in m
        pol: Stokes vector (S0, S1, S2, S3) of every particle
    """
    species: Species
    num: int
    weight: float = 1.0
    normal_espec: Optional[bool] = None
    gamma: float = 0.0
    sigma: float = 0.0
    gamma_min: float = 0.0
    gamma_max: float = 0.0
    transverse: TransverseDistribution = UniformDisk(0.0)
    sigma_z: float = 0.0
    energy_chirp: float = 0.0
    angle: float = 0.0
    collision_plane_angle: float = 0.0
    rms_div: float = 0.0
    initial_z: float = 0.0
    offset: tuple = (0.0, 0.0, 0.0)
    pol: tuple = (1.0, 0.0, 0.0, 0.0)

    def with_weight(self, weight):
        return self._replace(weight=weight)

    def with_normal_energy_spectrum(self, gamma, sigma):
        return self._replace(normal_espec=True, gamma=gamma, sigma=sigma)

    def with_bremsstrahlung_spectrum(self, gamma_min, gamma_max):
        assert 0 < gamma_min <= gamma_max, "require 0 < gamma_min <= gamma_max"
        return self._replace(normal_espec=False, gamma_min=gamma_min, gamma_max=gamma_max)

    def with_divergence(self, rms_div):
        return self._replace(rms_div=rms_div)

    def with_collision_angle(self, angle):
        return self._replace(angle=angle)

    def with_collision_plane_at(self, angle):
        return self._replace(collision_plane_angle=angle)

    def with_uniformly_distributed_xy(self, r_max):
        assert r_max >= 0, "r_max must be non-negative"
        return self._replace(transverse=UniformDisk(r_max))

    def with_normally_distributed_xy(self, sigma_x, sigma_y):
        assert sigma_x >= 0 and sigma_y >= 0, "sigma must be non-negative"
        return self._replace(transverse=NormalXY(sigma_x, sigma_y))

    def with_trunc_normally_distributed_xy(self, sigma_x, sigma_y, x_max, y_max):
        assert sigma_x >= 0 and sigma_y >= 0, "sigma must be non-negative"
        assert x_max > 0 and y_max > 0, "truncation must be positive"
        return self._replace(transverse=TruncNormalXY(sigma_x, sigma_y, x_max, y_max))

    def with_length(self, sigma_z):
        assert sigma_z >= 0, "sigma_z must be non-negative"
        return self._replace(sigma_z=sigma_z)

    def with_energy_chirp(self, rho):
        assert -1 <= rho <= 1, "energy chirp is a correlation coefficient"
        return self._replace(energy_chirp=rho)

    def with_initial_z(self, initial_z):
        return self._replace(initial_z=initial_z)

    def with_offset(self, offset):
        return self._replace(offset=tuple(float(v) for v in offset))

    def with_polarization(self, pol):
        return self._replace(pol=tuple(float(v) for v in pol))

    def transverse_dstr_is_normal(self) -> bool:
        return isinstance(self.transverse, (NormalXY, TruncNormalXY))

    def has_brem_spec(self) -> bool:
        return self.normal_espec is False

    def radius(self):
        '''
        Returns
        -------
        (size, cut) : rms (or maximum) radius in x and where the
            distribution is cut off in x
        '''
        if isinstance(self.transverse, NormalXY):
            return self.transverse.sigma_x, inf
        if isinstance(self.transverse, TruncNormalXY):
            return self.transverse.sigma_x, self.transverse.x_max
        return self.transverse.r_max, self.transverse.r_max

    def _sample_gamma_and_dz(self, rng: Generator):
        if self.normal_espec:
            rho = self.energy_chirp
            while True:
                n0 = rng.standard_normal()
                n1 = rng.standard_normal()
                n2 = rho * n0 + sqrt(1.0 - rho**2) * n1
                gamma = self.gamma + self.sigma * n2
                if gamma > 1.0:
                    return gamma, self.sigma_z * n0

        # dN/dx ~ 4/(3x) - 4/3 + x, largest at x_min
        x_min = self.gamma_min / self.gamma_max
        y_max = 4 / (3 * x_min) - 4/3 + x_min
        while True:
            x = x_min + (1.0 - x_min) * rng.random()
            y = 4 / (3 * x) - 4/3 + x
            if rng.random() <= y / y_max:
                break
        return x * self.gamma_max, self.sigma_z * rng.standard_normal()

    def build(self, rng: Generator) -> list:
        '''
        Sample the beam.

        Returns
        -------
        list of Particle, with id and parent_id equal to the index
        '''
        assert self.normal_espec is not None, "unspecified energy spectrum"

        particles = []
        for i in range(self.num):
            gamma, dz = self._sample_gamma_and_dz(rng)

            if self.species.is_massive:
                u_abs = -sqrt(gamma**2 - 1.0)
            else:
                u_abs = -gamma

            theta_x = self.angle + self.rms_div * rng.standard_normal()
            theta_y = self.rms_div * rng.standard_normal()
            u = three_vector(
                u_abs * sin(theta_x) * cos(theta_y),
                u_abs * sin(theta_y),
                u_abs * cos(theta_x) * cos(theta_y),
            )
            u = rotate_around_z(u, self.collision_plane_angle)
            if self.species.is_massive:
                u = unitize(four_vector(0.0, *u))
            else:
                u = lightlike(*u)

            if self.offset[2] >= 0.0:
                # beam centre beyond initial_z
                t, z = -self.initial_z, self.initial_z + self.offset[2] + dz
            else:
                # closer to the focus, so launched earlier
                t, z = -self.initial_z - abs(self.offset[2]), self.initial_z + dz

            x, y = self.transverse.sample(rng)
            r = three_vector(x + self.offset[0], y + self.offset[1], z)
            r = rotate_around_y(r, self.angle)
            r = rotate_around_z(r, self.collision_plane_angle)

            particle = Particle.create(self.species, four_vector(t, *r)) \
                .with_normalized_momentum(u) \
                .with_polarization(np.array(self.pol)) \
                .with_weight(self.weight) \
                .with_id(i) \
                .with_parent_id(i)
            particles.append(particle)
        return particles
