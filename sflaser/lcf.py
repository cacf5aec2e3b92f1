'''
Locally constant field dynamics of a single particle.

Everything here works on the field values at one point, as returned by
`Field.fields`, and never looks up the field itself.
'''
from math import sqrt, sin, cos, pi

import numpy as np
from numba import njit
from numpy.random import Generator
from scipy.constants import c

from .geometry import four_vector, dot, unitize, lightlike, \
    polarization_basis, linear_polarization_angle
from .inline import vay_inline, LL_push_inline, CLL_push_inline, calculate_chi_inline
from .particles import EquationOfMotion, RadiationMode, RadiationEvent, PairCreationEvent
from .qed.tables import integ_photon_prob_rate_from_table, integ_pair_prob_rate_from_table, \
    photon_stokes_from_table, _chi_min
from .qed.rejection_sampling import photon_delta_from_rejection_sampling, \
    pair_delta_from_rejection_sampling

vay_cpu = njit(vay_inline)
LL_push_cpu = njit(LL_push_inline)
CLL_push_cpu = njit(CLL_push_inline)
calculate_chi_cpu = njit(calculate_chi_inline)

_rr_code = {
    EquationOfMotion.LORENTZ: 0,
    EquationOfMotion.LANDAU_LIFSHITZ: 1,
    EquationOfMotion.MODIFIED_LANDAU_LIFSHITZ: 2,
}


@njit
def _vay_push_kernel(ux, uy, uz, Ex, Ey, Ez, Bx, By, Bz, rqm, dt, rr):
    gamma = sqrt(1 + ux**2 + uy**2 + uz**2)
    ux_, uy_, uz_, inv_gamma_ = vay_cpu(ux, uy, uz, Ex, Ey, Ez, Bx, By, Bz, rqm, dt)
    # work done by the Lorentz force alone
    absorbed = 1.0 / inv_gamma_ - gamma
    if rr > 0:
        chi_e = calculate_chi_cpu(Ex, Ey, Ez, Bx, By, Bz, ux_, uy_, uz_, inv_gamma_)
        if rr == 1:
            ux_, uy_, uz_, inv_gamma_ = LL_push_cpu(ux_, uy_, uz_, inv_gamma_, chi_e, dt)
        else:
            ux_, uy_, uz_, inv_gamma_ = CLL_push_cpu(ux_, uy_, uz_, inv_gamma_, chi_e, dt)
    return ux_, uy_, uz_, inv_gamma_, absorbed


def half_step(r: np.ndarray, u: np.ndarray, dt: float) -> np.ndarray:
    '''position after half of `dt` at constant momentum `u`'''
    return r + 0.5 * c * dt * u / u[0]


def vay_push(r, u, E, B, rqm, dt, eqn=EquationOfMotion.LORENTZ):
    '''
    Advance a particle by `dt`.

    Parameters
    ----------
    r, u : np.ndarray
        four-position and normalized four-momentum at the start of the step
    E, B : np.ndarray
        fields at the midpoint `half_step(r, u, dt)`
    rqm : float
        charge to mass ratio in C/kg, zero for photons
    dt : float
        timestep in s
    eqn : EquationOfMotion

    Returns
    -------
    r, u, dt, absorbed : absorbed is the energy gained from the field in
        units of m_e c^2, excluding radiation reaction losses
    '''
    if rqm == 0.0:
        return r + c * dt * u / u[0], u.copy(), dt, 0.0

    r_half = half_step(r, u, dt)
    ux, uy, uz, inv_gamma, absorbed = _vay_push_kernel(
        u[1], u[2], u[3],
        E[0], E[1], E[2], B[0], B[1], B[2],
        rqm, dt, _rr_code[eqn],
    )
    u_new = four_vector(1.0 / inv_gamma, ux, uy, uz)
    return half_step(r_half, u_new, dt), u_new, dt, absorbed


def radiation_reaction(u3, E, B, dt, eqn):
    '''spatial momentum `u3` after the radiation reaction drag of `eqn` over `dt`'''
    if not eqn.includes_rr:
        return u3
    inv_gamma = 1 / sqrt(1 + u3[0]**2 + u3[1]**2 + u3[2]**2)
    chi_e = calculate_chi_cpu(E[0], E[1], E[2], B[0], B[1], B[2], u3[0], u3[1], u3[2], inv_gamma)
    push = LL_push_cpu if eqn is EquationOfMotion.LANDAU_LIFSHITZ else CLL_push_cpu
    ux, uy, uz, _ = push(u3[0], u3[1], u3[2], inv_gamma, chi_e, dt)
    return np.array([ux, uy, uz])


def emission_probability(chi_e: float, gamma: float, dt: float) -> float:
    '''probability to emit a photon within `dt`, clamped to [0, 1]'''
    prob = integ_photon_prob_rate_from_table(chi_e) * dt / gamma
    return min(max(prob, 0.0), 1.0)


def _wave_direction(u, E, B):
    '''
    null vector along the local direction of energy flow, or against the
    particle if there is none to absorb momentum from
    '''
    S = np.cross(E, B)
    norm = np.linalg.norm(S)
    if norm > 0.0:
        return four_vector(1.0, *(S / norm))
    n = u[1:] / np.linalg.norm(u[1:])
    return four_vector(1.0, *(-n))


def radiate(u, E, B, a, dt, rng: Generator, mode=RadiationMode.QUANTUM):
    '''
    Sample the emission of a photon by an electron or positron with momentum
    `u` during `dt`.

    Returns
    -------
    RadiationEvent, or None if nothing is emitted
    '''
    if mode is RadiationMode.CLASSICAL or a == 0.0:
        return None
    u_abs = sqrt(u[1]**2 + u[2]**2 + u[3]**2)
    if u_abs == 0.0:
        return None
    gamma = u[0]
    chi_e = calculate_chi_cpu(E[0], E[1], E[2], B[0], B[1], B[2], u[1], u[2], u[3], 1.0 / gamma)
    if chi_e < _chi_min:
        return None

    if rng.random() >= emission_probability(chi_e, gamma, dt):
        return None

    delta = photon_delta_from_rejection_sampling(chi_e, rng)

    # emission cone of opening 1/gamma around the momentum
    r1, r2 = rng.random(2)
    theta = sqrt(r1 / (1.0 - r1)) / gamma
    phi = 2 * pi * r2
    n = u[1:] / u_abs
    e1, e2 = polarization_basis(u)
    direction = cos(theta) * n + sin(theta) * (cos(phi) * e1 + sin(phi) * e2)
    k = lightlike(*(delta * gamma * direction))

    # linearly polarized along the transverse acceleration
    F = E + c * np.cross(u[1:] / gamma, B)
    psi = linear_polarization_angle(k, F)
    xi = photon_stokes_from_table(chi_e, delta)
    pol = np.array([1.0, xi * cos(2 * psi), xi * sin(2 * psi), 0.0])

    # put the recoiling particle back on shell with momentum from the field
    w = u - k
    N = _wave_direction(u, E, B)
    if dot(N, w) <= 0.0:
        N = four_vector(1.0, *(-n))
    s = (1.0 - dot(w, w)) / (2 * dot(N, w))
    u_prime = unitize(w + s * N)

    return RadiationEvent(k, u_prime, pol, a, chi_e, s)


def _deplete(pol, xi, psi, W0, W3, dtau):
    '''
    Stokes vector of the photons that survive `dtau`, given the rates
    W0 + xi W3 in the frame of the force
    '''
    s0 = 1.0 - (W0 + xi * W3) * dtau
    if s0 <= 0.0:
        return pol.copy()
    xi_45 = -pol[1] * sin(2 * psi) + pol[2] * cos(2 * psi)
    L = (xi - (W3 + xi * W0) * dtau) / s0
    L_45 = xi_45 * (1.0 - W0 * dtau) / s0
    V = pol[3] * (1.0 - W0 * dtau) / s0
    return np.array([
        1.0,
        L * cos(2 * psi) - L_45 * sin(2 * psi),
        L * sin(2 * psi) + L_45 * cos(2 * psi),
        V,
    ])


def pair_create(k, pol, E, B, a, dt, rng: Generator, rate_increase=1.0):
    '''
    Sample the decay of a photon with momentum `k` and Stokes vector `pol`
    into an electron-positron pair during `dt`.

    Events are sampled with a probability increased by `rate_increase`;
    the event's `frac` is the share of the photon that actually decays.

    Returns
    -------
    prob : float
        true probability of pair creation within `dt`
    pol : np.ndarray
        Stokes vector of the photon, if it survives
    event : PairCreationEvent or None
    '''
    assert rate_increase > 0.0, 'rate_increase must be positive'
    if a == 0.0:
        return 0.0, pol, None
    k0 = k[0]
    chi_gamma = calculate_chi_cpu(E[0], E[1], E[2], B[0], B[1], B[2], k[1], k[2], k[3], 1.0 / k0)
    if chi_gamma < _chi_min:
        return 0.0, pol, None

    F = E + c * np.cross(k[1:] / k0, B)
    psi = linear_polarization_angle(k, F)
    xi = pol[1] * cos(2 * psi) + pol[2] * sin(2 * psi)

    W0, W3 = integ_pair_prob_rate_from_table(chi_gamma)
    dtau = dt / k0
    prob = min(max((W0 + xi * W3) * dtau, 0.0), 1.0)
    prob_sampling = min(1.0, rate_increase * prob)
    pol_new = _deplete(pol, xi, psi, W0, W3, dtau)

    if rng.random() >= prob_sampling:
        return prob, pol_new, None

    delta = pair_delta_from_rejection_sampling(chi_gamma, xi, rng)
    u_e = unitize(delta * k)
    u_p = unitize((1.0 - delta) * k)
    absorption = u_e[0] + u_p[0] - k0
    event = PairCreationEvent(u_e, u_p, prob / prob_sampling, a, chi_gamma, absorption)
    return prob, pol_new, event
