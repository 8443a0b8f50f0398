"""
Particle identities and reaction products.

The particle table resolves final fragments to particle definitions:
a fixed set of special particles keyed by (A, Z), plus ground-state and
registered isomeric ions built from the nuclear data provider.

Reaction products can be packed into NumPy structured arrays for
analysis and HDF5 output.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

ELEMENT_SYMBOLS = (
    'n', 'H', 'He', 'Li', 'Be', 'B', 'C', 'N', 'O', 'F', 'Ne',
    'Na', 'Mg', 'Al', 'Si', 'P', 'S', 'Cl', 'Ar', 'K', 'Ca',
    'Sc', 'Ti', 'V', 'Cr', 'Mn', 'Fe', 'Co', 'Ni', 'Cu', 'Zn',
    'Ga', 'Ge', 'As', 'Se', 'Br', 'Kr', 'Rb', 'Sr', 'Y', 'Zr',
    'Nb', 'Mo', 'Tc', 'Ru', 'Rh', 'Pd', 'Ag', 'Cd', 'In', 'Sn',
    'Sb', 'Te', 'I', 'Xe', 'Cs', 'Ba', 'La', 'Ce', 'Pr', 'Nd',
    'Pm', 'Sm', 'Eu', 'Gd', 'Tb', 'Dy', 'Ho', 'Er', 'Tm', 'Yb',
    'Lu', 'Hf', 'Ta', 'W', 'Re', 'Os', 'Ir', 'Pt', 'Au', 'Hg',
    'Tl', 'Pb', 'Bi', 'Po', 'At', 'Rn', 'Fr', 'Ra', 'Ac', 'Th',
    'Pa', 'U', 'Np', 'Pu', 'Am', 'Cm', 'Bk', 'Cf', 'Es', 'Fm',
    'Md', 'No', 'Lr', 'Rf', 'Db', 'Sg', 'Bh', 'Hs', 'Mt', 'Ds',
    'Rg', 'Cn', 'Nh', 'Fl', 'Mc', 'Lv', 'Ts', 'Og',
)

# Long-lived isomers registered by default: (Z, A, excitation energy [MeV])
DEFAULT_ISOMERS = (
    (27, 60, 0.05859),     # Co-60m
    (43, 99, 0.14268),     # Tc-99m
    (49, 115, 0.33624),    # In-115m
    (72, 178, 2.44600),    # Hf-178m2
    (73, 180, 0.07710),    # Ta-180m
    (95, 242, 0.04860),    # Am-242m
)

# Structured dtype for reaction products
PRODUCT_DTYPE = np.dtype([
    ('pdg', np.int64),                # PDG encoding
    ('A', np.int32),                  # mass number
    ('Z', np.int32),                  # charge number
    ('momentum', np.float64, 3),      # px, py, pz [MeV/c]
    ('total_energy', np.float64),     # MeV
    ('kinetic_energy', np.float64),   # MeV
    ('excitation_energy', np.float64),  # MeV
    ('formation_time', np.float64),   # ns
])


@dataclass(frozen=True)
class ParticleDefinition:
    """Resolved particle identity."""

    name: str
    pdg_encoding: int
    pdg_mass: float               # MeV/c²
    pdg_charge: float             # units of e
    atomic_number: int            # Z (0 for leptons, mesons, photons)
    atomic_mass: int              # baryon number A
    excitation_energy: float = 0.0
    float_level: int = 0

    @property
    def is_ion(self) -> bool:
        return self.pdg_encoding >= 1000000000


SPECIAL_PARTICLES: Dict[Tuple[int, int], ParticleDefinition] = {
    (0, 0): ParticleDefinition('gamma', 22, 0.0, 0.0, 0, 0),
    (0, -1): ParticleDefinition('e-', 11, 0.51099895, -1.0, 0, 0),
    (-1, 1): ParticleDefinition('pi+', 211, 139.57039, 1.0, 0, 0),
    (-1, -1): ParticleDefinition('pi-', -211, 139.57039, -1.0, 0, 0),
    (-1, 0): ParticleDefinition('pi0', 111, 134.9768, 0.0, 0, 0),
    (1, 0): ParticleDefinition('neutron', 2112, 939.56542052, 0.0, 0, 1),
    (1, 1): ParticleDefinition('proton', 2212, 938.27208816, 1.0, 1, 1),
    (2, 1): ParticleDefinition('deuteron', 1000010020, 1875.61294257, 1.0, 1, 2),
    (3, 1): ParticleDefinition('triton', 1000010030, 2808.92113298, 1.0, 1, 3),
    (3, 2): ParticleDefinition('He3', 1000020030, 2808.39160743, 2.0, 2, 3),
    (4, 2): ParticleDefinition('alpha', 1000020040, 3727.3794066, 2.0, 2, 4),
}


@dataclass(frozen=True, eq=False)
class ReactionProduct:
    """Final particle emitted by the cascade."""

    definition: ParticleDefinition
    momentum: np.ndarray          # [px, py, pz] MeV/c
    total_energy: float           # MeV
    formation_time: float = 0.0   # ns

    @property
    def kinetic_energy(self) -> float:
        return self.total_energy - self.definition.pdg_mass

    @property
    def atomic_mass(self) -> int:
        return self.definition.atomic_mass

    @property
    def atomic_number(self) -> int:
        return self.definition.atomic_number

    def __repr__(self) -> str:
        return (f"ReactionProduct({self.definition.name}, "
                f"T={self.kinetic_energy:.3f} MeV, "
                f"p=({self.momentum[0]:.3f}, {self.momentum[1]:.3f}, {self.momentum[2]:.3f}))")


def products_to_array(products: Sequence[ReactionProduct]) -> np.ndarray:
    """Pack reaction products into a PRODUCT_DTYPE structured array."""
    array = np.zeros(len(products), dtype=PRODUCT_DTYPE)
    for i, product in enumerate(products):
        definition = product.definition
        array['pdg'][i] = definition.pdg_encoding
        array['A'][i] = definition.atomic_mass
        array['Z'][i] = definition.atomic_number
        array['momentum'][i] = product.momentum
        array['total_energy'][i] = product.total_energy
        array['kinetic_energy'][i] = product.kinetic_energy
        array['excitation_energy'][i] = definition.excitation_energy
        array['formation_time'][i] = product.formation_time
    return array


def parse_nucleus(name: str) -> Tuple[int, int]:
    """
    Parse a nucleus name to (A, Z).

    Examples:
        'C-12' or 'C12' → (12, 6)
        'alpha' → (4, 2)
    """
    aliases = {
        'neutron': (1, 0),
        'proton': (1, 1),
        'deuteron': (2, 1),
        'triton': (3, 1),
        'alpha': (4, 2),
    }
    if name.lower() in aliases:
        return aliases[name.lower()]

    match = re.fullmatch(r'([A-Z][a-z]?)-?(\d+)', name.strip())
    if match is None or match.group(1) not in ELEMENT_SYMBOLS:
        raise ValueError(f"Cannot parse nucleus name '{name}'")

    return int(match.group(2)), ELEMENT_SYMBOLS.index(match.group(1))


def ion_name(Z: int, A: int, excitation_energy: float = 0.0) -> str:
    """Ion name, e.g. 'C12' or 'Tc99[142.680]' (excitation in keV)."""
    symbol = ELEMENT_SYMBOLS[Z] if 0 <= Z < len(ELEMENT_SYMBOLS) else f'Z{Z}'
    if excitation_energy > 0.0:
        return f"{symbol}{A}[{excitation_energy * 1000.0:.3f}]"
    return f"{symbol}{A}"


class ParticleTable:
    """
    Registry of particle definitions.

    Ground-state ions exist for every (Z, A) with a known nuclear mass.
    Excited ions exist only for registered isomer levels.

    Usage:
        table = ParticleTable(NuclearData())
        table.special_particle(4, 2)           # alpha
        table.get_ion(6, 12)                    # C12
        table.get_ion(43, 99, 0.14268)          # Tc99[142.680]
    """

    def __init__(self, nuclear_data, level_tolerance: float = 0.001,
                 isomers: Sequence[Tuple[int, int, float]] = DEFAULT_ISOMERS):
        """
        Initialize the particle table.

        Parameters:
            nuclear_data: Provider of nuclear_mass(Z, A)
            level_tolerance: Energy tolerance when matching isomer levels [MeV]
            isomers: (Z, A, excitation [MeV]) isomer levels to register
        """
        self.nuclear_data = nuclear_data
        self.level_tolerance = level_tolerance
        self._ions: Dict[Tuple[int, int, int], ParticleDefinition] = {}
        self._isomers: Dict[Tuple[int, int], List[ParticleDefinition]] = {}

        for Z, A, energy in isomers:
            self.add_isomer(Z, A, energy)

    @staticmethod
    def special_particle(A: int, Z: int) -> Optional[ParticleDefinition]:
        """Look up photons, leptons, pions, nucleons and light ions by (A, Z)."""
        return SPECIAL_PARTICLES.get((A, Z))

    def add_isomer(self, Z: int, A: int, excitation_energy: float,
                   float_level: int = 0) -> ParticleDefinition:
        """Register an isomeric level of (Z, A)."""
        ground = self.get_ground_state_ion(Z, A)
        if ground is None:
            raise ValueError(f"No ground state for Z={Z}, A={A}")

        levels = self._isomers.setdefault((Z, A), [])
        isomer_index = min(len(levels) + 1, 9)
        definition = ParticleDefinition(
            name=ion_name(Z, A, excitation_energy),
            pdg_encoding=ground.pdg_encoding + isomer_index,
            pdg_mass=ground.pdg_mass + excitation_energy,
            pdg_charge=float(Z),
            atomic_number=Z,
            atomic_mass=A,
            excitation_energy=excitation_energy,
            float_level=float_level,
        )
        levels.append(definition)
        return definition

    def get_ground_state_ion(self, Z: int, A: int) -> Optional[ParticleDefinition]:
        """Ground-state ion, or None when the nucleus is unknown."""
        key = (Z, A, 0)
        definition = self._ions.get(key)
        if definition is not None:
            return definition

        if A < 1:
            return None
        mass = self.nuclear_data.nuclear_mass(Z, A)
        if mass <= 0.0:
            return None

        definition = ParticleDefinition(
            name=ion_name(Z, A),
            pdg_encoding=1000000000 + Z * 10000 + A * 10,
            pdg_mass=mass,
            pdg_charge=float(Z),
            atomic_number=Z,
            atomic_mass=A,
        )
        self._ions[key] = definition
        return definition

    def get_ion(self, Z: int, A: int, excitation_energy: float = 0.0,
                float_level: int = 0) -> Optional[ParticleDefinition]:
        """
        Ion in the requested state.

        Parameters:
            Z: Charge number
            A: Mass number
            excitation_energy: Excitation energy [MeV]
            float_level: Floating level index

        Returns:
            Matching definition, or None when no such level is known
        """
        if excitation_energy < self.level_tolerance and float_level == 0:
            return self.get_ground_state_ion(Z, A)

        for definition in self._isomers.get((Z, A), ()):
            if (abs(definition.excitation_energy - excitation_energy) < self.level_tolerance
                    and definition.float_level == float_level):
                return definition

        return None
