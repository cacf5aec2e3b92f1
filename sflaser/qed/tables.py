'''
LCFA emission and pair creation rates.

dW/ddelta per unit proper time, in units of alpha m c^2 / hbar, with
z = (chi_gamma / (chi_e chi_e'))^(2/3):

    photon : -[Ai1(z) + (2/z + chi_gamma sqrt(z)) Ai'(z)]
    pair   :   Ai1(z) + (2/z - chi_gamma sqrt(z)) Ai'(z) + xi Ai'(z)/z

where Ai1(z) is the integral of Ai from z to infinity and xi the linear
Stokes parameter of the photon along the direction of the force.
'''

import os

import numpy as np
from numba import njit
import math
from scipy.constants import alpha, m_e, hbar, c
from scipy.special import airy
from numpy.polynomial.legendre import leggauss
import h5py
from tqdm.auto import tqdm

from . import _table_file

_rate_factor = alpha*m_e*c**2/hbar

# default resolutions
_z_N = 4096
_z_min = 0.0
_z_max = 100.0
_log_chi_N = 256
_log_chi_min = -3.0
_log_chi_max = 2.0
_delta_N = 256
# margin on the tabulated maxima used for rejection sampling
_max_margin = 1.25


def Ai(z):
    return airy(z)[0]

def Aip(z):
    return airy(z)[1]


def int_Ai(z, order=8):
    '''
    Integral of Ai from each point of the ascending grid `z` to infinity.

    Gauss-Legendre quadrature on each grid interval, summed from the far end
    so that the exponentially small tail keeps its relative precision.
    '''
    z = np.asarray(z, dtype=np.float64)
    x, w = leggauss(order)
    left, right = z[:-1], z[1:]
    half = 0.5 * (right - left)
    mid = 0.5 * (right + left)
    nodes = mid[:, None] + half[:, None] * x[None, :]
    interval = half * (Ai(nodes) * w[None, :]).sum(axis=1)
    # beyond the last point Ai(t) ~ Ai(z) exp(-sqrt(z) (t - z))
    tail = Ai(z[-1]) / max(math.sqrt(z[-1]), 1.0)
    return np.append(np.cumsum(interval[::-1])[::-1] + tail, tail)


def airy_tables(z_N=_z_N, z_min=_z_min, z_max=_z_max):
    z = np.linspace(z_min, z_max, z_N)
    return int_Ai(z), Aip(z)


if _table_file is not None:
    with h5py.File(_table_file, 'r') as f:
        dset = f['int_Ai']
        _int_Ai_table = dset[()]
        _z_N = int(dset.attrs['z_N'])
        _z_min, _z_max = (float(v) for v in dset.attrs['z_range'])
        _Aip_table = f['Aip'][()]
    del f, dset
else:
    _int_Ai_table, _Aip_table = airy_tables()

_z_delta = (_z_max - _z_min) / (_z_N - 1)


@njit
def _airy_from_table(z):
    '''linear interpolation of (Ai1(z), Ai'(z)), zero beyond the table'''
    if z >= _z_max:
        return 0.0, 0.0
    idx = int(math.floor((z - _z_min) / _z_delta))
    w = (z - _z_min) / _z_delta - idx
    int_Ai_ = (1.0 - w) * _int_Ai_table[idx] + w * _int_Ai_table[idx+1]
    Aip_ = (1.0 - w) * _Aip_table[idx] + w * _Aip_table[idx+1]
    return int_Ai_, Aip_


@njit
def photon_prob_rate_from_table(chi_e, delta):
    '''emission rate per unit proper time and unit delta, in s^-1'''
    if delta <= 0.0 or delta >= 1.0:
        return 0.0
    chi_gamma = delta * chi_e
    chi_ep = chi_e - chi_gamma
    z = (chi_gamma/chi_e/chi_ep)**(2/3)
    if z >= _z_max:
        return 0.0
    int_Ai_, Aip_ = _airy_from_table(z)
    return -_rate_factor*(int_Ai_ + (2.0/z + chi_gamma*math.sqrt(z)) * Aip_)


@njit
def photon_stokes_from_table(chi_e, delta):
    '''degree of linear polarization of the emitted photon along the force'''
    if delta <= 0.0 or delta >= 1.0:
        return 0.0
    chi_gamma = delta * chi_e
    chi_ep = chi_e - chi_gamma
    z = (chi_gamma/chi_e/chi_ep)**(2/3)
    int_Ai_, Aip_ = _airy_from_table(z)
    total = -(int_Ai_ + (2.0/z + chi_gamma*math.sqrt(z)) * Aip_)
    if total <= 0.0:
        return 0.0
    return min(1.0, -Aip_ / z / total)


@njit
def pair_prob_rate_from_table(chi_gamma, delta, xi):
    '''
    pair creation rate per unit proper time and unit electron energy
    fraction delta, in s^-1, for a photon with linear Stokes parameter xi
    '''
    if delta <= 0.0 or delta >= 1.0:
        return 0.0
    chi_e = delta * chi_gamma
    chi_ep = chi_gamma - chi_e
    z = (chi_gamma/chi_e/chi_ep)**(2/3)
    if z >= _z_max:
        return 0.0
    int_Ai_, Aip_ = _airy_from_table(z)
    # - for pair
    rate = _rate_factor*(int_Ai_ + (2.0/z - chi_gamma*math.sqrt(z)) * Aip_ + xi * Aip_ / z)
    return max(rate, 0.0)


@njit
def _integrate_row(chi, s_nodes, s_weights):
    '''
    totals and maxima of both spectra at one chi.

    photon spectrum integrated in s = delta^(1/3), pair spectrum in delta.
    '''
    photon_rate = 0.0
    photon_max = 0.0
    pair_rate = 0.0
    pair_linear = 0.0
    pair_max = 0.0
    for i in range(s_nodes.size):
        s = s_nodes[i]
        f = 3*s**2 * photon_prob_rate_from_table(chi, s**3)
        photon_rate += s_weights[i] * f
        photon_max = max(photon_max, f)

        r0 = pair_prob_rate_from_table(chi, s, 0.0)
        r_par = pair_prob_rate_from_table(chi, s, 1.0)
        r_perp = pair_prob_rate_from_table(chi, s, -1.0)
        pair_rate += s_weights[i] * r0
        pair_linear += s_weights[i] * 0.5 * (r_par - r_perp)
        pair_max = max(pair_max, r_par, r_perp)
    return photon_rate, photon_max, pair_rate, pair_linear, pair_max


def rate_tables(log_chi_N=_log_chi_N, log_chi_min=_log_chi_min, log_chi_max=_log_chi_max, delta_N=_delta_N, progress=False):
    '''
    Total rates and sampling maxima on a grid in log10(chi).

    Returns
    -------
    dict of arrays : photon_rate, photon_max, pair_rate, pair_linear, pair_max
        (rates in s^-1 per unit proper time)
    '''
    x, w = leggauss(delta_N)
    s_nodes = 0.5 * (x + 1.0)
    s_weights = 0.5 * w
    log_chi = np.linspace(log_chi_min, log_chi_max, log_chi_N)
    names = ['photon_rate', 'photon_max', 'pair_rate', 'pair_linear', 'pair_max']
    out = {name: np.zeros(log_chi_N) for name in names}

    for i in tqdm(range(log_chi_N), unit='chi', disable=not progress):
        row = _integrate_row(10.0**log_chi[i], s_nodes, s_weights)
        for name, value in zip(names, row):
            out[name][i] = value
    out['photon_max'] *= _max_margin
    out['pair_max'] *= _max_margin
    return out


def _log_table(rate):
    return np.log10(np.maximum(rate, 1e-300))


if _table_file is not None:
    with h5py.File(_table_file, 'r') as f:
        dset = f['photon_rate']
        _log_chi_N = int(dset.attrs['log_chi_N'])
        _log_chi_min, _log_chi_max = (float(v) for v in dset.attrs['log_chi_range'])
        _tables = {name: f[name][()] for name in ['photon_rate', 'photon_max', 'pair_rate', 'pair_linear', 'pair_max']}
    del f, dset
else:
    _tables = rate_tables()

_log_chi_delta = (_log_chi_max - _log_chi_min) / (_log_chi_N - 1)
_chi_min = 10.0**_log_chi_min

# rates interpolated in log space, the linear part as a ratio to the total
_photon_log_rate_table = _log_table(_tables['photon_rate'])
_photon_log_max_table = _log_table(_tables['photon_max'])
_pair_log_rate_table = _log_table(_tables['pair_rate'])
_pair_log_max_table = _log_table(_tables['pair_max'])
_pair_linear_ratio_table = _tables['pair_linear'] / np.maximum(_tables['pair_rate'], 1e-300)


@njit
def _interp_log_chi(table, chi):
    log_chi = math.log10(chi)
    if log_chi >= _log_chi_max:
        return table[_log_chi_N - 1]
    if log_chi <= _log_chi_min:
        return table[0]
    x = (log_chi - _log_chi_min) / _log_chi_delta
    idx = int(math.floor(x))
    w = x - idx
    return (1.0 - w) * table[idx] + w * table[idx+1]


@njit
def integ_photon_prob_rate_from_table(chi_e):
    return 10.0**_interp_log_chi(_photon_log_rate_table, chi_e)

@njit
def photon_max_from_table(chi_e):
    return 10.0**_interp_log_chi(_photon_log_max_table, chi_e)

@njit
def integ_pair_prob_rate_from_table(chi_gamma):
    '''
    total pair creation rate per unit proper time, split as W0 + xi W3
    for a photon with linear Stokes parameter xi along the force
    '''
    rate = 10.0**_interp_log_chi(_pair_log_rate_table, chi_gamma)
    ratio = _interp_log_chi(_pair_linear_ratio_table, chi_gamma)
    return rate, rate * ratio

@njit
def pair_max_from_table(chi_gamma):
    return 10.0**_interp_log_chi(_pair_log_max_table, chi_gamma)


def table_gen(
    table_path,
    log_chi_N=1024, log_chi_min=_log_chi_min, log_chi_max=_log_chi_max,
    z_N=16384, z_min=_z_min, z_max=_z_max,
    delta_N=1024,
):
    '''
    Write higher resolution tables to `table_path`/tables.h5, to be picked
    up through the SFLASER_TABLES environment variable.

    The totals are integrated over the Airy tables already loaded, so
    regenerate in two passes when changing z_N.
    '''
    with h5py.File(os.path.join(table_path, 'tables.h5'), 'w') as h5f:
        print("Integrating Ai")
        _int_Ai, _Aip = airy_tables(z_N, z_min, z_max)
        for name, data in [('int_Ai', _int_Ai), ('Aip', _Aip)]:
            dset = h5f.create_dataset(name, data=data)
            dset.attrs['z_N'] = z_N
            dset.attrs['z_range'] = (z_min, z_max)
            dset.attrs['z_delta'] = (z_max - z_min) / (z_N - 1)

        print("Integrating rates")
        tables = rate_tables(log_chi_N, log_chi_min, log_chi_max, delta_N, progress=True)
        for name, data in tables.items():
            dset = h5f.create_dataset(name, data=data)
            dset.attrs['log_chi_N'] = log_chi_N
            dset.attrs['log_chi_range'] = (log_chi_min, log_chi_max)


if __name__ == '__main__':
    table_gen(os.path.dirname(__file__))
