"""
deexcitation_mc: Statistical de-excitation of excited nuclei

Monte Carlo cascade turning an excited nucleus into particle-stable
reaction products through multifragmentation, Fermi break-up,
light-particle evaporation and photon emission.

Modules:
    core: Fragments, nuclear data, particle definitions
    physics: Kinematics, channel models, stage gates, split caches
    handler: Cascade engine, result conversion, handler factory
    config: Handler configuration (dict / YAML)
    io: HDF5 event output
"""

__version__ = "0.1.0"

from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.core.nuclear_data import NuclearData
from deexcitation_mc.core.particle import ParticleTable, ReactionProduct
from deexcitation_mc.exceptions import (
    ConfigurationError,
    DeexcitationError,
    DivergentCascadeError,
    IdentityResolutionError,
    NoApplicableChannelError,
)
from deexcitation_mc.handler.excitation_handler import ExcitationHandler
from deexcitation_mc.handler.factory import (
    FermiConverter,
    HandlerConverter,
    create_fermi_converter,
    create_handler,
)

__all__ = [
    "Fragment",
    "NuclearData",
    "ParticleTable",
    "ReactionProduct",
    "ExcitationHandler",
    "HandlerConverter",
    "FermiConverter",
    "create_handler",
    "create_fermi_converter",
    "DeexcitationError",
    "DivergentCascadeError",
    "NoApplicableChannelError",
    "IdentityResolutionError",
    "ConfigurationError",
]
