"""
Error types raised by the de-excitation cascade.

All of them are fatal for the current call: the handler discards every
fragment it holds before raising and never returns partial output.
"""


class DeexcitationError(Exception):
    """Base class for de-excitation errors."""


class DivergentCascadeError(DeexcitationError):
    """
    The evaporation loop reached its iteration ceiling.

    Attributes:
        initial: Copy of the fragment passed to the handler
        current: Copy of the fragment being dispatched when the ceiling was hit
        iterations: Number of dispatched fragments
        n_discarded: Number of fragments released before raising
    """

    def __init__(self, initial, current, iterations: int, n_discarded: int = 0):
        self.initial = initial
        self.current = current
        self.iterations = iterations
        self.n_discarded = n_discarded
        super().__init__(
            f"Infinite loop in the de-excitation module: {iterations} iterations\n"
            f"      Initial fragment: {initial}\n"
            f"      Current fragment: {current}"
        )


class NoApplicableChannelError(DeexcitationError):
    """No stage gate accepted a fragment (the configured gates leave a gap)."""

    MESSAGE = "no model was applied, check conditions"

    def __init__(self, fragment=None, stage: str = ""):
        self.fragment = fragment
        self.stage = stage
        super().__init__(self.MESSAGE)


class IdentityResolutionError(DeexcitationError):
    """Not even a ground-state ion could be resolved for a final fragment."""

    def __init__(self, Z: int, A: int):
        self.Z = Z
        self.A = A
        super().__init__(f"ion table has no ground state for Z={Z}, A={A}")


class ConfigurationError(DeexcitationError, ValueError):
    """Invalid handler parameters or unreadable nuclear data."""
