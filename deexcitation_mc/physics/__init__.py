"""Physics module: De-excitation channels, kinematics and stage gates."""

from deexcitation_mc.physics.cache import LFUCache, SimpleCache
from deexcitation_mc.physics.evaporation import Evaporation
from deexcitation_mc.physics.fermi_breakup import FermiBreakUp
from deexcitation_mc.physics.multifragmentation import MultiFragmentation
from deexcitation_mc.physics.photon_evaporation import PhotonEvaporation

__all__ = [
    "LFUCache",
    "SimpleCache",
    "Evaporation",
    "FermiBreakUp",
    "MultiFragmentation",
    "PhotonEvaporation",
]
