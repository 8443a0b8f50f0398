"""Handler module: Cascade engine and event conversion."""

from deexcitation_mc.handler.excitation_handler import ExcitationHandler
from deexcitation_mc.handler.factory import (
    FermiConverter,
    HandlerConverter,
    create_fermi_converter,
    create_handler,
)

__all__ = [
    "ExcitationHandler",
    "FermiConverter",
    "HandlerConverter",
    "create_fermi_converter",
    "create_handler",
]
