import unittest
from scipy.constants import e, m_e, c, pi
import numpy as np

from sflaser.fields import Field
from sflaser.geometry import four_vector, unitize, lightlike
from sflaser.lcf import vay_push, LL_push_cpu, CLL_push_cpu
from sflaser.particles import EquationOfMotion


class StaticField(Field):
    def __init__(self, E, B):
        self.E = np.asarray(E, dtype=float)
        self.B = np.asarray(B, dtype=float)

    def fields(self, r):
        return self.E.copy(), self.B.copy(), 1.0


class Stub(Field):
    pass


class TestPusher(unittest.TestCase):
    def test_vay(self):
        r = 1e-6 #m
        ux0 = 1000
        uz0 = 10
        u0 = np.sqrt(ux0**2 + uz0**2)
        v = ux0 / np.sqrt(1 + ux0**2) * c
        T = 2*pi*r/v

        bz = m_e*c/e * ux0 / r
        field = StaticField([0, 0, 0], [0, 0, bz])

        pos = four_vector(0, 0, 0, 0)
        u = unitize(four_vector(0, ux0, 0, uz0))

        nt = 20
        for _ in range(nt):
            pos, u, dt, absorbed = field.push(pos, u, -e/m_e, T/nt)
            self.assertAlmostEqual(absorbed, 0.0, places=6)

        self.assertLess(np.abs(np.sqrt(u[1]**2 + u[2]**2 + u[3]**2) - u0)/u0, 1E-10)
        self.assertAlmostEqual(dt, T/nt)

    def test_electric_work(self):
        field = StaticField([-1e12, 0, 0], [0, 0, 0])
        pos = four_vector(0, 0, 0, 0)
        u = four_vector(1, 0, 0, 0)
        pos, u, dt, absorbed = field.push(pos, u, -e/m_e, 1e-15)
        self.assertGreater(u[1], 0.0)
        self.assertGreater(pos[1], 0.0)
        self.assertAlmostEqual(absorbed, u[0] - 1.0, places=12)

    def test_stub_field_is_inert(self):
        field = Stub()
        pos = four_vector(1e-7, 2e-6, -1e-6, 3e-6)
        u = unitize(four_vector(0, 10, -3, 100))
        for eqn in EquationOfMotion:
            for dt in [1e-18, 1e-15, 1e-12]:
                with self.subTest(eqn=eqn, dt=dt):
                    pos_, u_, _, absorbed = field.push(pos, u, -e/m_e, dt, eqn)
                    np.testing.assert_allclose(pos_, pos + c*u*dt/u[0], rtol=1e-12)
                    np.testing.assert_allclose(u_, u, rtol=1e-14)
                    self.assertAlmostEqual(absorbed, 0.0, places=10)

    def test_photon_straight_line(self):
        field = StaticField([1e13, 0, 0], [0, 1e5, 0])
        pos = four_vector(0, 0, 0, 0)
        k = lightlike(0, 0, -1000)
        pos_, k_, _, absorbed = field.push(pos, k, 0.0, 1e-15)
        np.testing.assert_array_equal(k_, k)
        np.testing.assert_allclose(pos_, [c*1e-15, 0, 0, -c*1e-15])
        self.assertEqual(absorbed, 0.0)

    def test_vay_push_midpoint(self):
        # no field at the midpoint, so the step is a straight line
        pos = four_vector(0, 0, 0, 0)
        u = unitize(four_vector(0, 0, 0, 1))
        pos_, u_, _, _ = vay_push(pos, u, np.zeros(3), np.zeros(3), -e/m_e, 1e-15)
        np.testing.assert_allclose(u_, u)
        np.testing.assert_allclose(pos_[3], c*1e-15/np.sqrt(2))

    def test_LL(self):
        ux0 = 1000.0
        inv_gamma = 1 / np.sqrt(1 + ux0**2)
        ux, uy, uz, _ = LL_push_cpu(ux0, 0.0, 0.0, inv_gamma, 1.0, 2.67E-17)
        self.assertLess(ux, ux0, "ux after LL push is greater than intial")
        # 10% energy loss for gamma=1000 and chi=1
        self.assertAlmostEqual((ux0-ux)/ux0, 0.1, 2)

    def test_CLL(self):
        ux0 = 1000.0
        inv_gamma = 1 / np.sqrt(1 + ux0**2)
        ux_LL, _, _, _ = LL_push_cpu(ux0, 0.0, 0.0, inv_gamma, 1.0, 2.67E-17)
        ux_CLL, _, _, _ = CLL_push_cpu(ux0, 0.0, 0.0, inv_gamma, 1.0, 2.67E-17)
        self.assertLess(ux0 - ux_CLL, ux0 - ux_LL)
        # Gaunt factor at chi = 1
        self.assertAlmostEqual((ux0 - ux_CLL)/(ux0 - ux_LL), 0.1811, 3)

    def test_rr_in_push(self):
        B = 1e5
        field = StaticField([0, 0, 0], [0, B, 0])
        pos = four_vector(0, 0, 0, 0)
        u = unitize(four_vector(0, 0, 0, -1000))
        gamma = {}
        for eqn in EquationOfMotion:
            _, u_, _, _ = field.push(pos, u, -e/m_e, 1e-17, eqn)
            gamma[eqn] = u_[0]
        self.assertLess(gamma[EquationOfMotion.LANDAU_LIFSHITZ], gamma[EquationOfMotion.MODIFIED_LANDAU_LIFSHITZ])
        self.assertLess(gamma[EquationOfMotion.MODIFIED_LANDAU_LIFSHITZ], gamma[EquationOfMotion.LORENTZ])
