from sflaser import BeamBuilder, FocusedLaser, Species, EquationOfMotion, RadiationMode, \
    Polarization, Envelope, emit_photon

import matplotlib.pyplot as plt

import numpy as np
from scipy.constants import m_e, e


um = 1e-6

l0 = 0.8*um
a0 = 150
w0 = 4*um
n_cycles = 10

gamma0 = 1000
rng = np.random.default_rng()


def simulate(N=1, eqn=EquationOfMotion.LANDAU_LIFSHITZ, mode=RadiationMode.CLASSICAL):
    laser = FocusedLaser(a0, l0, w0, n_cycles, Polarization.LINEAR, envelope=Envelope.GAUSSIAN)
    dt = laser.max_timestep()

    electrons = BeamBuilder(Species.ELECTRON, N) \
        .with_normal_energy_spectrum(gamma0, 0.01*gamma0) \
        .with_normally_distributed_xy(1*um, 1*um) \
        .with_initial_z(laser.ideal_initial_z()) \
        .build(rng)

    trajectories = []
    photons = []
    for electron in electrons:
        r, u = electron.r, electron.u
        trajectory = [r]
        while laser.contains(r):
            r, u, _, _ = laser.push(r, u, -e/m_e, dt, eqn)
            electron = electron.with_position(r).with_momentum(u)
            event = laser.radiate(r, u, dt, rng, mode)
            if event is not None:
                electron, photon = emit_photon(electron, event, len(photons))
                u = electron.u
                photons.append(photon)
            trajectory.append(r)
        trajectories.append(np.array(trajectory))

    return trajectories, photons


def main():
    fig, axes = plt.subplots(
        2, 1,
        tight_layout = True,
        figsize=(5, 5),
    )

    ax = axes[0]
    for eqn in [
        EquationOfMotion.LORENTZ,
        EquationOfMotion.LANDAU_LIFSHITZ,
    ]:
        trajectories, _ = simulate(1, eqn)
        ax.plot(
            trajectories[0][:, 3]/um, trajectories[0][:, 1]/um,
            label = f'eqn = {eqn.name}',
        )
    ax.set_xlabel('z [um]')
    ax.set_ylabel('x [um]')
    ax.legend()

    ax = axes[1]
    trajectories, photons = simulate(20, EquationOfMotion.LORENTZ, RadiationMode.QUANTUM)
    for trajectory in trajectories:
        ax.plot(
            trajectory[:, 3]/um, trajectory[:, 1]/um,
            lw = 1,
            color = 'k',
        )
    ax.set_xlabel('z [um]')
    ax.set_ylabel('x [um]')
    ax.set_title(f'{len(photons)} photons')
    fig.savefig('trajectory.png', dpi=300)

if __name__ == "__main__":
    main()
