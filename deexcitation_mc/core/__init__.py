"""Core module: Fragments, nuclear data and particle definitions."""

from deexcitation_mc.core.fragment import Fragment, GROUND_STATE_THRESHOLD
from deexcitation_mc.core.nuclear_data import NuclearData
from deexcitation_mc.core.particle import ParticleDefinition, ParticleTable, ReactionProduct

__all__ = [
    "Fragment",
    "GROUND_STATE_THRESHOLD",
    "NuclearData",
    "ParticleDefinition",
    "ParticleTable",
    "ReactionProduct",
]
