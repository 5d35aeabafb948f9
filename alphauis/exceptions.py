"""Exception types raised by alphauis.

Configuration errors are fatal and raised before any processing starts.
Insufficient-site errors are scoped to one peptide: the in-silico map
builders catch them, skip the peptide and report it.
"""


class AlphaUISError(Exception):
    """Base class for all alphauis errors."""


class AssayConfigurationError(AlphaUISError, ValueError):
    """Invalid assay parameters (overlapping windows, min > max, ...)."""


class UnknownModificationError(AlphaUISError, KeyError):
    """Modification name not present in the modification database."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""


class InsufficientSitesError(AlphaUISError, ValueError):
    """A sequence offers fewer modifiable sites than modifications observed.

    Attributes
    ----------
    sequence : str
        Stripped sequence that was examined
    modification : str
        Modification name
    required : int
        Number of sites needed (observed modification count)
    available : int
        Number of sites the modification database allows
    """

    def __init__(self, sequence: str, modification: str, required: int, available: int):
        self.sequence = sequence
        self.modification = modification
        self.required = required
        self.available = available
        super().__init__(
            f"{sequence}: {modification} requires {required} site(s), "
            f"only {available} available"
        )


class HookNotImplementedError(AlphaUISError, NotImplementedError):
    """A labeling hook was invoked but the labeler does not support it."""
