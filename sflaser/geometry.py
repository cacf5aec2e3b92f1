'''
Four-vectors, three-vectors and Stokes vectors as plain numpy arrays.

Four-positions are (ct, x, y, z) in metres, four-momenta are normalized
to m c. The Minkowski metric has signature (+, -, -, -).
'''
import numpy as np
from math import sqrt, sin, cos


def four_vector(t, x, y, z) -> np.ndarray:
    return np.array([t, x, y, z], dtype=np.float64)


def three_vector(x, y, z) -> np.ndarray:
    return np.array([x, y, z], dtype=np.float64)


def dot(a: np.ndarray, b: np.ndarray) -> float:
    '''Minkowski inner product of two four-vectors.'''
    return a[0]*b[0] - a[1]*b[1] - a[2]*b[2] - a[3]*b[3]


def unitize(u: np.ndarray) -> np.ndarray:
    '''
    Put a normalized momentum on the unit mass shell, u.u = 1,
    keeping its spatial part and recomputing the time component.
    '''
    return four_vector(sqrt(1.0 + u[1]**2 + u[2]**2 + u[3]**2), u[1], u[2], u[3])


def lightlike(ux, uy, uz) -> np.ndarray:
    '''Four-momentum with k.k = 0 and the given spatial part.'''
    return four_vector(sqrt(ux**2 + uy**2 + uz**2), ux, uy, uz)


def rotate_around_y(v: np.ndarray, theta: float) -> np.ndarray:
    return three_vector(
        v[0]*cos(theta) + v[2]*sin(theta),
        v[1],
        -v[0]*sin(theta) + v[2]*cos(theta),
    )


def rotate_around_z(v: np.ndarray, theta: float) -> np.ndarray:
    return three_vector(
        v[0]*cos(theta) - v[1]*sin(theta),
        v[0]*sin(theta) + v[1]*cos(theta),
        v[2],
    )


def unpolarized() -> np.ndarray:
    '''Stokes vector (S0, S1, S2, S3) of an unpolarized photon.'''
    return np.array([1.0, 0.0, 0.0, 0.0])


def polarization_basis(k: np.ndarray):
    '''
    Transverse basis (e1, e2) used for the linear Stokes parameters of a
    photon with four-momentum `k`. e1 is perpendicular to both y and k,
    falling back to x if k is along y.

    Returns
    -------
    e1, e2 : three-vectors with e1 x e2 along k
    '''
    n = k[1:] / np.linalg.norm(k[1:])
    e1 = np.cross((0.0, 1.0, 0.0), n)
    norm = np.linalg.norm(e1)
    if norm < 1e-12:
        e1 = np.cross(n, (0.0, 0.0, 1.0))
        norm = np.linalg.norm(e1)
    e1 = e1 / norm
    e2 = np.cross(n, e1)
    return e1, e2


def linear_polarization_angle(k: np.ndarray, direction: np.ndarray) -> float:
    '''
    Angle between the photon basis vector e1 and the projection of
    `direction` onto the plane transverse to `k`.
    '''
    e1, e2 = polarization_basis(k)
    return np.arctan2(np.dot(direction, e2), np.dot(direction, e1))
