from scipy.constants import m_e, c, pi, epsilon_0, hbar, e
from math import sqrt, log

def vay_inline( ux, uy, uz, Ex, Ey, Ez, Bx, By, Bz, rqm, dt ) :
    '''
    Vay pusher for the normalized momentum u = p/(m c) of a particle with
    charge to mass ratio `rqm`, given the fields at the half step.

    Ref. J.-L. Vay, Phys. Plasmas 15, 056701 (2008)
    '''
    efactor = rqm*dt/(2*c)
    bfactor = rqm*dt/2

    inv_gamma = 1 / sqrt(1 + ux**2 + uy**2 + uz**2)
    # first half, full Lorentz force at the old momentum
    ux_half = ux + efactor * Ex + bfactor * inv_gamma * (uy * Bz - uz * By)
    uy_half = uy + efactor * Ey + bfactor * inv_gamma * (uz * Bx - ux * Bz)
    uz_half = uz + efactor * Ez + bfactor * inv_gamma * (ux * By - uy * Bx)

    # second half, E field
    ux_prime = ux_half + efactor * Ex
    uy_prime = uy_half + efactor * Ey
    uz_prime = uz_half + efactor * Ez

    # second half, B field solved for the new gamma
    Tx = bfactor * Bx
    Ty = bfactor * By
    Tz = bfactor * Bz
    T2 = Tx**2 + Ty**2 + Tz**2
    u_star = ux_prime * Tx + uy_prime * Ty + uz_prime * Tz
    sigma = 1 + ux_prime**2 + uy_prime**2 + uz_prime**2 - T2
    gamma_ = sqrt(0.5 * (sigma + sqrt(sigma**2 + 4 * (T2 + u_star**2))))

    tx = Tx / gamma_
    ty = Ty / gamma_
    tz = Tz / gamma_
    s = 1 / (1 + tx**2 + ty**2 + tz**2)
    u_dot_t = ux_prime * tx + uy_prime * ty + uz_prime * tz

    ux_ = s * (ux_prime + u_dot_t * tx + uy_prime * tz - uz_prime * ty)
    uy_ = s * (uy_prime + u_dot_t * ty + uz_prime * tx - ux_prime * tz)
    uz_ = s * (uz_prime + u_dot_t * tz + ux_prime * ty - uy_prime * tx)
    inv_gamma_ = 1 / sqrt(1 + ux_**2 + uy_**2 + uz_**2)
    return ux_, uy_, uz_, inv_gamma_


def LL_push_inline( ux, uy, uz, inv_gamma, chi_e, dt ) :
    factor = -2/3 / (4*pi*epsilon_0) * e**2 * m_e * c / hbar**2 * dt

    ux_ = ux + factor * chi_e**2 * ux*inv_gamma
    uy_ = uy + factor * chi_e**2 * uy*inv_gamma
    uz_ = uz + factor * chi_e**2 * uz*inv_gamma
    inv_gamma_ = 1 / sqrt(1 + ux_**2 + uy_**2 + uz_**2)
    return ux_, uy_, uz_, inv_gamma_


def CLL_push_inline( ux, uy, uz, inv_gamma, chi_e, dt ) :
    '''
    LL_push_inline suppressed by the ratio of quantum to classical radiated
    power, fit from C. P. Ridgers et al., J. Plasma Phys. 83, 715830502 (2017)
    '''
    gaunt = (1 + 4.8*(1 + chi_e)*log(1 + 1.7*chi_e) + 2.44*chi_e**2)**(-2/3)
    factor = -2/3 / (4*pi*epsilon_0) * e**2 * m_e * c / hbar**2 * dt * gaunt

    ux_ = ux + factor * chi_e**2 * ux*inv_gamma
    uy_ = uy + factor * chi_e**2 * uy*inv_gamma
    uz_ = uz + factor * chi_e**2 * uz*inv_gamma
    inv_gamma_ = 1 / sqrt(1 + ux_**2 + uy_**2 + uz_**2)
    return ux_, uy_, uz_, inv_gamma_


def calculate_chi_inline(Ex, Ey, Ez, Bx, By, Bz, ux, uy, uz, inv_gamma):
    factor = e*hbar / (m_e**2 * c**3)
    gamma = 1.0 / inv_gamma
    chi2 = (
        (gamma*Ex + (uy*Bz - uz*By)*c)**2 +
        (gamma*Ey + (uz*Bx - ux*Bz)*c)**2 +
        (gamma*Ez + (ux*By - uy*Bx)*c)**2 -
        (ux*Ex + uy*Ey + uz*Ez)**2
    )
    # rounding can leave a tiny negative value in a pure E or co-moving field
    if chi2 <= 0.0:
        return 0.0
    return factor * sqrt(chi2)
