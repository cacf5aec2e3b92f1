from numpy.random import Generator
from .tables import photon_prob_rate_from_table, pair_prob_rate_from_table, \
    photon_max_from_table, pair_max_from_table


def photon_delta_from_rejection_sampling(chi_e: float, rng: Generator) -> float:
    '''
    Energy fraction delta of an emitted photon, sampled from the LCFA
    spectrum at `chi_e`.

    Candidates are drawn as delta = s^3 with s uniform, which removes the
    delta^(-2/3) divergence of the spectrum (Gonoskov et al. 2015).
    Loops until a candidate is accepted.
    '''
    f_max = photon_max_from_table(chi_e)
    while True:
        r1, r2 = rng.random(2)
        f = 3*r1**2 * photon_prob_rate_from_table(chi_e, r1**3)
        if r2 * f_max < f:
            return r1**3


def pair_delta_from_rejection_sampling(chi_gamma: float, xi: float, rng: Generator) -> float:
    '''
    Energy fraction delta of the electron from a decaying photon with
    quantum parameter `chi_gamma` and linear Stokes parameter `xi`.
    Loops until a candidate is accepted.
    '''
    f_max = pair_max_from_table(chi_gamma)
    while True:
        r1, r2 = rng.random(2)
        f = pair_prob_rate_from_table(chi_gamma, r1, xi)
        if r2 * f_max < f:
            return r1
