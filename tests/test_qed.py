import unittest

import numpy as np
from scipy.constants import c, e, hbar, m_e

from sflaser.geometry import four_vector, unitize, lightlike, unpolarized, dot
from sflaser.lcf import radiate, pair_create, emission_probability
from sflaser.particles import RadiationMode
from sflaser.qed.tables import integ_photon_prob_rate_from_table, integ_pair_prob_rate_from_table, \
    photon_prob_rate_from_table, pair_prob_rate_from_table, _rate_factor
from sflaser.qed.rejection_sampling import photon_delta_from_rejection_sampling


class TestTables(unittest.TestCase):
    def test_classical_limit(self):
        chi_e = 1e-3
        rate = integ_photon_prob_rate_from_table(chi_e)
        expected = 5 / (2*np.sqrt(3)) * chi_e * _rate_factor
        self.assertLess(abs(rate - expected) / expected, 0.03)

    def test_rates_positive(self):
        for chi in [0.1, 1.0, 10.0]:
            with self.subTest(chi=chi):
                self.assertGreater(integ_photon_prob_rate_from_table(chi), 0.0)
                W0, W3 = integ_pair_prob_rate_from_table(chi)
                self.assertGreater(W0, 0.0)
                self.assertLess(abs(W3), W0)
                for delta in [0.1, 0.5, 0.9]:
                    self.assertGreater(photon_prob_rate_from_table(chi, delta), 0.0)
                    self.assertGreaterEqual(pair_prob_rate_from_table(chi, delta, 0.0), 0.0)

    def test_pair_rate_grows_with_chi(self):
        rates = [integ_pair_prob_rate_from_table(chi)[0] for chi in [0.1, 0.5, 1.0, 5.0]]
        self.assertTrue(all(a < b for a, b in zip(rates[:-1], rates[1:])))

    def test_photon_delta(self):
        rng = np.random.default_rng(0)
        deltas = np.array([photon_delta_from_rejection_sampling(1.0, rng) for _ in range(1000)])
        self.assertTrue(((deltas > 0) & (deltas < 1)).all())
        self.assertGreater(deltas.mean(), 0.05)
        self.assertLess(deltas.mean(), 0.5)


class TestRadiate(unittest.TestCase):
    def setUp(self) -> None:
        self.gamma = 1000
        self.ux = np.sqrt(self.gamma**2 - 1)
        self.u = unitize(four_vector(0, 0, 0, -self.ux))
        self.E = np.zeros(3)
        self.Bfield_from_chi = lambda chi_e : np.array([0.0, chi_e * m_e**2*c**2/e/hbar / self.ux, 0.0])
        return super().setUp()

    def test_no_event_at_zero_amplitude(self):
        rng = np.random.default_rng(1)
        B = self.Bfield_from_chi(1.0)
        for _ in range(100):
            self.assertIsNone(radiate(self.u, self.E, B, 0.0, 1e-13, rng))

    def test_classical_mode(self):
        rng = np.random.default_rng(1)
        B = self.Bfield_from_chi(1.0)
        for _ in range(100):
            self.assertIsNone(radiate(self.u, self.E, B, 1.0, 1e-13, rng, RadiationMode.CLASSICAL))

    def test_below_chi_min(self):
        rng = np.random.default_rng(1)
        B = self.Bfield_from_chi(1e-4)
        for _ in range(100):
            self.assertIsNone(radiate(self.u, self.E, B, 1.0, 1e-13, rng))

    def test_event(self):
        rng = np.random.default_rng(2)
        B = self.Bfield_from_chi(1.0)
        for _ in range(200):
            # probability clamped to 1
            event = radiate(self.u, self.E, B, 10.0, 1e-13, rng)
            self.assertIsNotNone(event)
            k, u_prime = event.k, event.u_prime
            self.assertAlmostEqual(dot(u_prime, u_prime), 1.0, delta=1e-9*u_prime[0]**2)
            self.assertAlmostEqual(dot(k, k), 0.0, delta=1e-9*k[0]**2)
            self.assertGreater(k[0], 0.0)
            self.assertLess(k[0], self.u[0])
            self.assertLess(k[3], 0.0)
            self.assertGreaterEqual(event.absorption, 0.0)
            self.assertAlmostEqual(u_prime[0] + k[0] - self.u[0], event.absorption, delta=1e-6)
            self.assertAlmostEqual(event.chi, 1.0, places=6)
            self.assertEqual(event.a_eff, 10.0)
            self.assertEqual(event.pol[0], 1.0)
            self.assertLessEqual(event.pol[1]**2 + event.pol[2]**2, 1.0 + 1e-12)

    def test_photon_number(self):
        chi_e = 1.0
        B = self.Bfield_from_chi(chi_e)
        dt = 0.05 * self.gamma / integ_photon_prob_rate_from_table(chi_e)
        self.assertAlmostEqual(emission_probability(chi_e, self.u[0], dt), 0.05)

        rng = np.random.default_rng(3)
        N = 20000
        n_photon = sum(radiate(self.u, self.E, B, 1.0, dt, rng) is not None for _ in range(N))
        n_photon_expected = 0.05 * N
        tor = 5*np.sqrt(n_photon_expected * 0.95)
        self.assertLess(abs(n_photon - n_photon_expected), tor, f'n_photon={n_photon}, n_photon_expected={n_photon_expected}')

    def test_reproducible(self):
        B = self.Bfield_from_chi(1.0)
        dt = 0.5 * self.gamma / integ_photon_prob_rate_from_table(1.0)
        rng1 = np.random.default_rng(42)
        rng2 = np.random.default_rng(42)
        for _ in range(50):
            event1 = radiate(self.u, self.E, B, 1.0, dt, rng1)
            event2 = radiate(self.u, self.E, B, 1.0, dt, rng2)
            self.assertEqual(event1 is None, event2 is None)
            if event1 is not None:
                np.testing.assert_array_equal(event1.k, event2.k)
                np.testing.assert_array_equal(event1.u_prime, event2.u_prime)
                np.testing.assert_array_equal(event1.pol, event2.pol)


class TestPairCreate(unittest.TestCase):
    def setUp(self) -> None:
        self.k = lightlike(0, 0, -1000)
        self.E = np.zeros(3)
        self.Bfield_from_chi = lambda chi : np.array([0.0, chi * m_e**2*c**2/e/hbar / self.k[0], 0.0])
        self.B = self.Bfield_from_chi(1.0)
        W0, _ = integ_pair_prob_rate_from_table(1.0)
        # true probability of 1% per step
        self.dt = 0.01 * self.k[0] / W0
        return super().setUp()

    def test_no_event_at_zero_amplitude(self):
        rng = np.random.default_rng(1)
        pol = unpolarized()
        for _ in range(100):
            prob, pol_, event = pair_create(self.k, pol, self.E, self.B, 0.0, 1e-13, rng, 10.0)
            self.assertEqual(prob, 0.0)
            self.assertIs(pol_, pol)
            self.assertIsNone(event)

    def test_rate_increase(self):
        pol = unpolarized()
        prob1, pol1, _ = pair_create(self.k, pol, self.E, self.B, 1.0, self.dt, np.random.default_rng(5), 1.0)
        prob10, pol10, _ = pair_create(self.k, pol, self.E, self.B, 1.0, self.dt, np.random.default_rng(5), 10.0)
        self.assertEqual(prob1, prob10)
        self.assertAlmostEqual(prob1, 0.01)
        np.testing.assert_array_equal(pol1, pol10)

    def test_event_rate_scales_with_rate_increase(self):
        pol = unpolarized()
        N = 20000
        n_pair = {}
        for rate_increase in [1.0, 10.0]:
            rng = np.random.default_rng(6)
            n = 0
            for _ in range(N):
                _, _, event = pair_create(self.k, pol, self.E, self.B, 1.0, self.dt, rng, rate_increase)
                if event is not None:
                    n += 1
                    self.assertAlmostEqual(event.frac, 1 / rate_increase, places=12)
            n_pair[rate_increase] = n
        ratio = n_pair[10.0] / n_pair[1.0]
        self.assertGreater(ratio, 7)
        self.assertLess(ratio, 13)

    def test_pair(self):
        rng = np.random.default_rng(7)
        for _ in range(100):
            prob, _, event = pair_create(self.k, unpolarized(), self.E, self.B, 1.0, 1e-12, rng)
            self.assertEqual(prob, 1.0)
            self.assertIsNotNone(event)
            u_e, u_p = event.u_e, event.u_p
            np.testing.assert_allclose(u_e[1:] + u_p[1:], self.k[1:], rtol=1e-12)
            self.assertAlmostEqual(dot(u_e, u_e), 1.0, delta=1e-9*u_e[0]**2)
            self.assertAlmostEqual(dot(u_p, u_p), 1.0, delta=1e-9*u_p[0]**2)
            self.assertGreater(event.absorption, 0.0)
            self.assertEqual(event.frac, 1.0)
            self.assertAlmostEqual(event.chi, 1.0, places=6)

    def test_depleted_polarization(self):
        W0, W3 = integ_pair_prob_rate_from_table(1.0)
        dt = 0.5 * self.k[0] / W0
        _, pol, _ = pair_create(self.k, unpolarized(), self.E, self.B, 1.0, dt, np.random.default_rng(8))
        self.assertEqual(pol[0], 1.0)
        linear = np.hypot(pol[1], pol[2])
        self.assertGreater(linear, 0.0)
        self.assertLessEqual(linear, 1.0)
        self.assertAlmostEqual(linear, abs(W3 / W0), places=9)
        self.assertEqual(pol[3], 0.0)

    def test_reproducible(self):
        W0, _ = integ_pair_prob_rate_from_table(1.0)
        dt = 0.1 * self.k[0] / W0
        rng1 = np.random.default_rng(9)
        rng2 = np.random.default_rng(9)
        pol1 = pol2 = unpolarized()
        n_event = 0
        for _ in range(50):
            prob1, pol1, event1 = pair_create(self.k, pol1, self.E, self.B, 1.0, dt, rng1, 2.0)
            prob2, pol2, event2 = pair_create(self.k, pol2, self.E, self.B, 1.0, dt, rng2, 2.0)
            self.assertEqual(prob1, prob2)
            np.testing.assert_array_equal(pol1, pol2)
            self.assertEqual(event1 is None, event2 is None)
            if event1 is not None:
                n_event += 1
                np.testing.assert_array_equal(event1.u_e, event2.u_e)
                np.testing.assert_array_equal(event1.u_p, event2.u_p)
                self.assertEqual(event1.frac, event2.frac)
        self.assertGreater(n_event, 0)
