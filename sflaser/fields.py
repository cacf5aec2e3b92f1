from enum import Enum, auto
from math import sin, cos, exp, log, sqrt, pi

import numpy as np
from numba import njit
from numpy.random import Generator

from . import lcf
from .particles import EquationOfMotion, RadiationMode


class Polarization(Enum):
    LINEAR = auto()
    CIRCULAR = auto()


class Envelope(Enum):
    """
    Temporal shape of a laser pulse with `n_cycles` cycles, as a function of
    the phase measured from the centre of the pulse.

    Values:
        COS_SQUARED: cos^2 of the phase over 2 n_cycles, zero beyond n_cycles pi
        FLATTOP: constant over n_cycles - 1 cycles, with one cycle cos^2 ramps
        GAUSSIAN: intensity FWHM of n_cycles cycles, cut at three times that
    """
    COS_SQUARED = 0
    FLATTOP = 1
    GAUSSIAN = 2

    @property
    def code(self) -> int:
        return self.value


@njit
def envelope_cpu(code, n_cycles, phi):
    '''
    envelope g and its derivative dg/dphi at phase `phi` from the centre

    code 0: cos^2, 1: flattop, 2: Gaussian
    '''
    if code == 0:
        if abs(phi) >= n_cycles*pi:
            return 0.0, 0.0
        x = phi / (2*n_cycles)
        return cos(x)**2, -sin(2*x) / (2*n_cycles)
    elif code == 1:
        flat = (n_cycles - 1) * pi
        if abs(phi) <= flat:
            return 1.0, 0.0
        if abs(phi) >= flat + 2*pi:
            return 0.0, 0.0
        x = 0.25 * (abs(phi) - flat)
        sign = 1.0 if phi > 0 else -1.0
        return cos(x)**2, -sign * sin(2*x) / 4
    else:
        width = 2*pi*n_cycles
        if abs(phi) > 3*width:
            return 0.0, 0.0
        g = exp(-2*log(2) * phi**2 / width**2)
        return g, -4*log(2) * phi / width**2 * g


def envelope_extent(envelope: Envelope, n_cycles: float) -> float:
    '''phase from the centre of the pulse beyond which the envelope vanishes'''
    if envelope is Envelope.COS_SQUARED:
        return n_cycles * pi
    elif envelope is Envelope.FLATTOP:
        return (n_cycles + 1) * pi
    else:
        return 3 * 2*pi*n_cycles


def envelope_integral(envelope: Envelope, n_cycles: float) -> float:
    '''integral of g^2 over the phase'''
    if envelope is Envelope.COS_SQUARED:
        return 0.75 * pi * n_cycles
    elif envelope is Envelope.FLATTOP:
        return 2*pi*(n_cycles - 1) + 1.5*pi
    else:
        return 2*pi*n_cycles * sqrt(pi / (4*log(2)))


class Field(object):
    """
    Electromagnetic field a particle can be pushed through.

    Subclasses provide `fields` and the extent of the field. The push and
    the QED processes only depend on the local fields, so they are shared.
    A subclass that does not override `fields` is field free.
    """
    def max_timestep(self):
        '''largest timestep in s for which the field is resolved, None if any'''
        return None

    def contains(self, r: np.ndarray) -> bool:
        '''whether the field can still act on a particle at four-position `r`'''
        raise NotImplementedError

    def ideal_initial_z(self) -> float:
        '''distance from the focus at which a particle is unaffected by the field'''
        raise NotImplementedError

    def fields(self, r: np.ndarray):
        '''
        Returns
        -------
        E : np.ndarray
            electric field in V/m
        B : np.ndarray
            magnetic field in T
        a : float
            local normalized amplitude
        '''
        return np.zeros(3), np.zeros(3), 0.0

    def energy(self):
        '''
        Returns
        -------
        (value, unit) : energy in J, or per unit length/area if the field is
            unbounded in that direction
        '''
        raise NotImplementedError

    def push(self, r, u, rqm, dt, eqn=EquationOfMotion.LORENTZ):
        '''
        Advance a particle with four-position `r`, normalized momentum `u` and
        charge to mass ratio `rqm` by `dt`.

        Returns
        -------
        r, u, dt, absorbed
        '''
        if rqm == 0.0:
            return lcf.vay_push(r, u, None, None, rqm, dt, eqn)
        E, B, _ = self.fields(lcf.half_step(r, u, dt))
        return lcf.vay_push(r, u, E, B, rqm, dt, eqn)

    def radiate(self, r, u, dt, rng: Generator, mode=RadiationMode.QUANTUM):
        '''RadiationEvent or None, see `lcf.radiate`'''
        E, B, a = self.fields(r)
        return lcf.radiate(u, E, B, a, dt, rng, mode)

    def pair_create(self, r, k, pol, dt, rng: Generator, rate_increase=1.0):
        '''(prob, pol, PairCreationEvent or None), see `lcf.pair_create`'''
        E, B, a = self.fields(r)
        return lcf.pair_create(k, pol, E, B, a, dt, rng, rate_increase)
