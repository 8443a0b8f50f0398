"""
Fragment Yields - Simple Example

De-excites a hot nucleus many times and plots the mass and charge
distributions of the final products.

This example validates:
    - Mass number and charge conservation per event
    - Channel mix (multifragmentation, Fermi break-up, evaporation, photons)
    - HDF5 event output

Expected behaviour:
    - C-12 @ 50 MeV: alphas, nucleons and light ions from Fermi break-up
    - Fe-56 @ 3 MeV/u: heavy evaporation residues near A = 45-50
    - Au-197 @ 6 MeV/u: broad intermediate-mass fragment distribution
"""

import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.core.particle import parse_nucleus, products_to_array
from deexcitation_mc.handler.factory import HandlerConverter, create_handler
from deexcitation_mc.io import write_events
from deexcitation_mc.logging_config import setup_logging


def simulate_yields(nucleus: str, energy_MeV_u: float, n_events: int = 2000,
                    cache: str = 'lfu', seed: int = 1):
    """
    De-excite a nucleus at rest repeatedly.

    Parameters:
        nucleus: Nucleus name (e.g., 'C-12', 'Au-197')
        energy_MeV_u: Excitation energy per nucleon [MeV/u]
        n_events: Number of de-excitations
        cache: Fermi break-up split cache ('lfu' or 'simple')
        seed: Random seed

    Returns:
        events: Products per event, products: all products as PRODUCT_DTYPE array
    """
    A, Z = parse_nucleus(nucleus)

    print(f"\n{'='*70}")
    print(f"Fragment Yields")
    print(f"{'='*70}")
    print(f"  Nucleus: {nucleus} (A={A}, Z={Z})")
    print(f"  Excitation: {energy_MeV_u} MeV/u ({energy_MeV_u * A:.1f} MeV)")
    print(f"  Events: {n_events:,}")
    print(f"{'='*70}\n")

    handler = create_handler({'cache': cache, 'seed': seed})
    fragment = Fragment.at_rest(A, Z, energy_MeV_u * A, handler.nuclear_data)

    converter = HandlerConverter(handler)
    events = converter.run([[fragment]] * n_events, verbose=True)
    products = np.concatenate([products_to_array(event) for event in events])

    multiplicity = np.array([len(event) for event in events])
    heavy = products[products['A'] > 4]

    print(f"\n{'='*70}")
    print(f"Results:")
    print(f"{'='*70}")
    print(f"  Mean multiplicity: {multiplicity.mean():.2f}")
    print(f"  Neutrons per event: {np.sum(products['pdg'] == 2112) / n_events:.2f}")
    print(f"  Protons per event: {np.sum(products['pdg'] == 2212) / n_events:.2f}")
    print(f"  Alphas per event: {np.sum(products['pdg'] == 1000020040) / n_events:.2f}")
    print(f"  Photons per event: {np.sum(products['pdg'] == 22) / n_events:.2f}")
    if len(heavy):
        print(f"  Mean A of fragments with A > 4: {heavy['A'].mean():.1f}")
    print(f"  Channel applications: {dict(handler.channel_counts)}")
    print(f"{'='*70}\n")

    return events, products


def plot_yields(products, nucleus, energy_MeV_u, save_path=None):
    """
    Plot mass and charge distributions of the products.

    Parameters:
        products: PRODUCT_DTYPE array
        nucleus: Nucleus name for title
        energy_MeV_u: Excitation energy for title
        save_path: Path to save figure (optional)
    """
    nuclei = products[products['A'] > 0]
    fig, (ax_mass, ax_charge) = plt.subplots(1, 2, figsize=(14, 6))

    mass_bins = np.arange(0.5, nuclei['A'].max() + 1.5)
    ax_mass.hist(nuclei['A'], bins=mass_bins, color='b', alpha=0.7)
    ax_mass.set_yscale('log')
    ax_mass.set_xlabel('Mass number A', fontsize=14, fontweight='bold')
    ax_mass.set_ylabel('Counts', fontsize=14, fontweight='bold')
    ax_mass.grid(True, alpha=0.3, linestyle='--')

    charge_bins = np.arange(-0.5, nuclei['Z'].max() + 1.5)
    ax_charge.hist(nuclei['Z'], bins=charge_bins, color='r', alpha=0.7)
    ax_charge.set_yscale('log')
    ax_charge.set_xlabel('Charge number Z', fontsize=14, fontweight='bold')
    ax_charge.set_ylabel('Counts', fontsize=14, fontweight='bold')
    ax_charge.grid(True, alpha=0.3, linestyle='--')

    fig.suptitle(f'Fragment yields: {nucleus} @ {energy_MeV_u} MeV/u',
                 fontsize=16, fontweight='bold')
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')
        print(f"Figure saved: {save_path}")

    return fig


def compare_excitation_energies(nucleus: str = 'Fe-56',
                                energies: list = [1, 3, 6],
                                n_events: int = 500):
    """
    Compare product mass distributions at several excitation energies.

    Parameters:
        nucleus: Nucleus name
        energies: List of excitation energies [MeV/u]
        n_events: Number of events per energy
    """
    plt.figure(figsize=(12, 7))

    colors = ['blue', 'green', 'red', 'purple', 'orange']

    for i, energy in enumerate(energies):
        _, products = simulate_yields(nucleus, energy, n_events=n_events)
        nuclei = products[products['A'] > 0]
        counts = np.bincount(nuclei['A'])
        mass_numbers = np.nonzero(counts)[0]

        plt.semilogy(mass_numbers, counts[mass_numbers] / n_events, 'o-',
                     color=colors[i % len(colors)], linewidth=1.5, markersize=4,
                     label=f'{energy} MeV/u')

    plt.xlabel('Mass number A', fontsize=14, fontweight='bold')
    plt.ylabel('Yield per event', fontsize=14, fontweight='bold')
    plt.title(f'Fragment yields: {nucleus} at several excitation energies',
              fontsize=16, fontweight='bold')
    plt.grid(True, alpha=0.3, linestyle='--')
    plt.legend(fontsize=11)
    plt.tight_layout()

    save_path = Path(__file__).parent / f'fragment_yields_comparison_{nucleus}.png'
    plt.savefig(save_path, dpi=300, bbox_inches='tight')
    print(f"\nComparison plot saved: {save_path}")

    return plt.gcf()


if __name__ == "__main__":
    setup_logging()

    output_dir = Path(__file__).parent

    for nucleus, energy in [('C-12', 50.0 / 12), ('Au-197', 6.0)]:
        events, products = simulate_yields(nucleus, energy, n_events=1000)
        plot_yields(products, nucleus, round(energy, 2),
                    save_path=output_dir / f'fragment_yields_{nucleus}.png')
        write_events(output_dir / f'events_{nucleus}.h5', events)

    compare_excitation_energies()
