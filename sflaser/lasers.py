'''
Laser pulses propagating along +z, polarized along x (and y for circular
polarization), with their peak at the origin at t = 0.

The phase is phi = omega t - k z. The normalized vector potential of a
plane wave is a0 g(phi) cos(phi + cep) on x, plus a0 g(phi) sin(phi + cep)
on y for circular polarization.
'''
import copy
from math import sin, cos, exp, atan, sqrt, pi

import numpy as np
from numba import njit
from scipy.constants import c, e, m_e, epsilon_0

from . import lcf
from .fields import Field, Envelope, Polarization, envelope_cpu, envelope_extent, envelope_integral
from .particles import EquationOfMotion


@njit
def plane_wave_fields(ct, z, a0, k, cep, envelope, n_cycles, circular):
    phi = k * (ct - z)
    g, dg = envelope_cpu(envelope, n_cycles, phi)
    E0 = a0 * m_e * c**2 * k / e
    psi = phi + cep
    # E = -(m c omega / e) da/dphi
    Ex = E0 * (g * sin(psi) - dg * cos(psi))
    Ey = 0.0
    if circular:
        Ey = -E0 * (g * cos(psi) + dg * sin(psi))
    return Ex, Ey, 0.0, -Ey/c, Ex/c, 0.0, a0 * g


@njit
def focused_laser_fields_lp(ct, x, y, z, a0, k, w0, cep, envelope, n_cycles):
    '''
    Paraxial Gaussian beam to second order in w0/zR.

    Ref. Y. I. Salamin & C. H. Keitel, Phys. Rev. Lett. 88, 095005 (2002)
    '''
    phi = k * (ct - z)
    g, dg = envelope_cpu(envelope, n_cycles, phi)
    if g == 0.0 and dg == 0.0:
        return 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0

    zR = 0.5 * k * w0**2
    ϵ = w0 / zR
    E0 = a0 * m_e * c**2 * k / e
    r2 = x**2 + y**2
    η = 1 / sqrt(1 + (z/zR)**2) # w0/w
    w = w0 / η

    ψG = atan(z/zR)
    ψR = k * z * r2 / (2 * (z**2 + zR**2))
    ψ = cep + phi + ψG - ψR

    ξ = x / w0
    ν = y / w0
    ρ2 = r2 / w0**2
    ρ4 = ρ2**2

    f = η * exp(-r2/w**2)
    S0 = sin(ψ)
    C0 = cos(ψ)
    S2 = η**2 * sin(ψ + 2*ψG)
    S3 = η**3 * sin(ψ + 3*ψG)
    C1 = η * cos(ψ + ψG)

    Ex = E0 * f * (g*S0 - dg*C0 + g*ϵ**2*(ξ**2*S2 - ρ4*S3/4))
    Ey = E0 * f * g * ξ*ν*ϵ**2*S2
    Ez = E0 * f * g * ξ*ϵ*C1

    Bx = 0.0
    By = E0/c * f * (g*S0 - dg*C0 + g*ϵ**2*(ρ2*S2/2 - ρ4*S3/4))
    Bz = E0/c * f * g * ν*ϵ*C1
    return Ex, Ey, Ez, Bx, By, Bz, a0 * g * f


@njit
def focused_laser_fields(ct, x, y, z, a0, k, w0, cep, envelope, n_cycles, circular):
    Ex, Ey, Ez, Bx, By, Bz, a = focused_laser_fields_lp(ct, x, y, z, a0, k, w0, cep, envelope, n_cycles)
    if circular:
        # the same beam turned by 90 degrees about z, a quarter period later
        Ex2, Ey2, Ez2, Bx2, By2, Bz2, _ = focused_laser_fields_lp(
            ct, y, -x, z, a0, k, w0, cep - 0.5*pi, envelope, n_cycles)
        Ex -= Ey2
        Ey += Ex2
        Ez += Ez2
        Bx -= By2
        By += Bx2
        Bz += Bz2
    return Ex, Ey, Ez, Bx, By, Bz, a


@njit
def ponderomotive_potential(ct, x, y, z, a2_peak, k, w0, envelope, n_cycles):
    '''
    cycle averaged <a^2> and its gradient in 1/m.
    w0 <= 0 is a plane wave.
    '''
    phi = k * (ct - z)
    g, dg = envelope_cpu(envelope, n_cycles, phi)
    if w0 <= 0.0:
        return a2_peak * g**2, 0.0, 0.0, -2 * k * a2_peak * g * dg

    zR = 0.5 * k * w0**2
    ζ = z / zR
    q = 1 / (1 + ζ**2) # (w0/w)^2
    r2 = x**2 + y**2
    h = q * exp(-2 * r2 * q / w0**2)
    a2 = a2_peak * g**2 * h
    dq_dz = -2 * ζ * q**2 / zR
    grad_x = -4 * x * q / w0**2 * a2
    grad_y = -4 * y * q / w0**2 * a2
    grad_z = dq_dz * (1/q - 2 * r2 / w0**2) * a2 - 2 * k * a2_peak * h * g * dg
    return a2, grad_x, grad_y, grad_z


class Laser(Field):
    '''
    Parameters
    ----------
    a0 : float
        peak normalized amplitude
    wavelength : float
        wavelength in m
    n_cycles : float
        duration of the pulse in cycles, see `Envelope`
    pol : Polarization
    cep : float
        carrier envelope phase in rad
    envelope : Envelope
    '''
    def __init__(self, a0, wavelength, n_cycles, pol, cep=0.0, envelope=Envelope.COS_SQUARED):
        assert a0 >= 0, "a0 must be non-negative"
        assert wavelength > 0, "wavelength must be positive"
        assert n_cycles > 0, "n_cycles must be positive"
        assert isinstance(pol, Polarization), "pol must be a Polarization"
        assert isinstance(envelope, Envelope), "envelope must be an Envelope"
        if envelope is Envelope.FLATTOP:
            assert n_cycles >= 1, "flattop pulse needs at least one cycle"

        self.a0 = a0
        self.wavelength = wavelength
        self.n_cycles = n_cycles
        self.pol = pol
        self.cep = cep
        self.envelope = envelope

    @property
    def k(self):
        return 2*pi / self.wavelength

    @property
    def circular(self) -> bool:
        return self.pol is Polarization.CIRCULAR

    @property
    def E0(self):
        '''peak electric field in V/m'''
        return self.a0 * m_e * c**2 * self.k / e

    def with_envelope(self, envelope: Envelope):
        assert isinstance(envelope, Envelope), "envelope must be an Envelope"
        if envelope is Envelope.FLATTOP:
            assert self.n_cycles >= 1, "flattop pulse needs at least one cycle"
        laser = copy.copy(self)
        laser.envelope = envelope
        return laser

    def max_timestep(self):
        return 0.01 * self.wavelength / c

    def _phi_max(self):
        return envelope_extent(self.envelope, self.n_cycles)

    def contains(self, r):
        return self.k * (r[0] - r[3]) < self._phi_max()

    def ideal_initial_z(self):
        return self._phi_max() / self.k

    def _energy_density(self):
        '''cycle averaged energy per unit area in J/m^2 of a plane wave'''
        factor = 1.0 if self.circular else 0.5
        return factor * epsilon_0 * self.E0**2 * envelope_integral(self.envelope, self.n_cycles) / self.k


class PlaneWave(Laser):
    def fields(self, r):
        Ex, Ey, Ez, Bx, By, Bz, a = plane_wave_fields(
            r[0], r[3], self.a0, self.k, self.cep,
            self.envelope.code, self.n_cycles, self.circular,
        )
        return np.array([Ex, Ey, Ez]), np.array([Bx, By, Bz]), a

    def energy(self):
        return self._energy_density(), "J/m^2"


class FocusedLaser(Laser):
    '''
    Gaussian beam focused at the origin.

    Parameters
    ----------
    waist : float
        1/e radius of the field at focus in m
    '''
    def __init__(self, a0, wavelength, waist, n_cycles, pol, cep=0.0, envelope=Envelope.COS_SQUARED):
        assert waist > 0, "waist must be positive"
        super().__init__(a0, wavelength, n_cycles, pol, cep, envelope)
        self.waist = waist

    def fields(self, r):
        Ex, Ey, Ez, Bx, By, Bz, a = focused_laser_fields(
            r[0], r[1], r[2], r[3], self.a0, self.k, self.waist, self.cep,
            self.envelope.code, self.n_cycles, self.circular,
        )
        return np.array([Ex, Ey, Ez]), np.array([Bx, By, Bz]), a

    def energy(self):
        return self._energy_density() * 0.5 * pi * self.waist**2, "J"


class FastLaser(Laser):
    '''
    Cycle averaged laser, in which particles move under the ponderomotive
    force and are not resolved on the scale of the wavelength.

    The momentum is the quasi-momentum, with u[0] = sqrt(1 + |u|^2 + <a^2>).
    '''
    _waist = 0.0

    @property
    def a2_peak(self):
        return self.a0**2 if self.circular else 0.5 * self.a0**2

    def max_timestep(self):
        return 0.05 * self.wavelength / c

    def _potential(self, r):
        return ponderomotive_potential(
            r[0], r[1], r[2], r[3], self.a2_peak, self.k, self._waist,
            self.envelope.code, self.n_cycles,
        )

    def fields(self, r):
        '''rms fields and amplitude'''
        a2 = self._potential(r)[0]
        a = sqrt(a2)
        E_rms = a * m_e * c**2 * self.k / e
        return np.array([E_rms, 0.0, 0.0]), np.array([0.0, E_rms / c, 0.0]), a

    def push(self, r, u, rqm, dt, eqn=EquationOfMotion.LORENTZ):
        '''
        Ponderomotive leapfrog, du/dt = -c grad<a^2> / (2 u0).

        Returns
        -------
        r, u, dt, absorbed : absorbed is the change in u0
        '''
        if rqm == 0.0:
            return lcf.vay_push(r, u, None, None, rqm, dt, eqn)

        u3 = u[1:]
        u0 = sqrt(1 + u3 @ u3 + self._potential(r)[0])
        r_half = r + 0.5 * c * dt * np.append(1.0, u3 / u0)

        a2, grad_x, grad_y, grad_z = self._potential(r_half)
        grad = np.array([grad_x, grad_y, grad_z])
        u_pred = u3 - 0.25 * c * dt * grad / sqrt(1 + u3 @ u3 + a2)
        u3_new = u3 - 0.5 * c * dt * grad / sqrt(1 + u_pred @ u_pred + a2)

        if eqn.includes_rr:
            E, B, _ = self.fields(r_half)
            u3_new = lcf.radiation_reaction(u3_new, E, B, dt, eqn)

        r_new = r_half + 0.5 * c * dt * np.append(1.0, u3_new / sqrt(1 + u3_new @ u3_new + a2))
        u0_new = sqrt(1 + u3_new @ u3_new + self._potential(r_new)[0])
        return r_new, np.append(u0_new, u3_new), dt, u0_new - u0


class FastPlaneWave(FastLaser):
    def energy(self):
        return self._energy_density(), "J/m^2"


class FastFocusedLaser(FastLaser):
    def __init__(self, a0, wavelength, waist, n_cycles, pol, cep=0.0, envelope=Envelope.COS_SQUARED):
        assert waist > 0, "waist must be positive"
        super().__init__(a0, wavelength, n_cycles, pol, cep, envelope)
        self.waist = waist

    @property
    def _waist(self):
        return self.waist

    def energy(self):
        return self._energy_density() * 0.5 * pi * self.waist**2, "J"
