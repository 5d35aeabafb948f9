"""Targeted experiment container: proteins, peptides and transitions.

Minimal in-memory representation consumed and mutated by the assay
workflow. Peptides are immutable once built; transitions are created and
replaced by the workflow stages.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Tuple

from .modifications import Modification, format_peptidoform

SwathWindow = Tuple[float, float]


@dataclass(frozen=True)
class Protein:
    """Protein entry referenced by peptides."""
    id: str
    sequence: str = ""


@dataclass(frozen=True)
class Peptide:
    """A peptide precursor: stripped sequence, modifications, charge.

    Attributes
    ----------
    id : str
        Unique peptide reference (typically one per sequence/charge)
    sequence : str
        Stripped amino acid sequence
    modifications : tuple of (str, int)
        (name, position) pairs; see ``alphauis.modifications``
    charge : int
        Precursor charge state
    protein_refs : tuple of str
        Owning proteins
    decoy : bool
        Whether this is a generated decoy peptide
    """

    id: str
    sequence: str
    modifications: Tuple[Modification, ...] = ()
    charge: int = 1
    protein_refs: Tuple[str, ...] = ()
    decoy: bool = False

    def __post_init__(self):
        # normalize lists passed by callers so the dataclass stays hashable
        object.__setattr__(self, "modifications", tuple(tuple(m) for m in self.modifications))
        object.__setattr__(self, "protein_refs", tuple(self.protein_refs))

    @property
    def peptidoform(self) -> str:
        """Modified sequence label, e.g. ``PEPS(Phospho)TIDEK``."""
        return format_peptidoform(self.sequence, self.modifications)

    def with_modifications(self, modifications) -> "Peptide":
        """Copy of this peptide carrying ``modifications`` instead."""
        return replace(self, modifications=tuple(modifications))


@dataclass
class Transition:
    """Precursor/product ion pair monitored by the instrument.

    ``detecting`` transitions are used for peak group detection,
    ``identifying`` transitions carry unique ion signatures that discriminate
    peptidoforms; ``peptidoforms`` lists the peptidoform labels the product
    ion is specific for.
    """

    id: str
    peptide_ref: str
    precursor_mz: float
    product_mz: float
    product_charge: int = 1
    fragment_type: str = ""
    fragment_ordinal: int = 0
    annotation: str = "unannotated"
    library_intensity: float = 0.0
    decoy: bool = False
    detecting: bool = True
    identifying: bool = False
    quantifying: bool = True
    uis: bool = False
    peptidoforms: Tuple[str, ...] = ()

    @property
    def is_annotated(self) -> bool:
        return self.annotation != "unannotated"


@dataclass
class TargetedExperiment:
    """Proteins, peptides and transitions of an assay library.

    ``peptides`` may be replaced or edited in place at any time, so lookups
    always read the current list.
    """

    proteins: List[Protein] = field(default_factory=list)
    peptides: List[Peptide] = field(default_factory=list)
    transitions: List[Transition] = field(default_factory=list)

    def peptide_index(self) -> Dict[str, Peptide]:
        """Map peptide id → peptide; the first peptide wins for repeated ids.

        Build it once per pass when resolving many references.
        """
        index: Dict[str, Peptide] = {}
        for peptide in self.peptides:
            index.setdefault(peptide.id, peptide)
        return index

    def get_peptide(self, ref: str) -> Peptide:
        """Look up a peptide by reference.

        Raises
        ------
        KeyError
            If no peptide with this id exists
        """
        for peptide in self.peptides:
            if peptide.id == ref:
                return peptide
        raise KeyError(f"Peptide reference not found: {ref}")

    def has_peptide(self, ref: str) -> bool:
        return any(peptide.id == ref for peptide in self.peptides)

    def add_peptide(self, peptide: Peptide) -> None:
        self.peptides.append(peptide)

    def transitions_by_peptide(self) -> Dict[str, List[Transition]]:
        """Group transitions by peptide reference, keeping input order."""
        groups: Dict[str, List[Transition]] = {}
        for transition in self.transitions:
            groups.setdefault(transition.peptide_ref, []).append(transition)
        return groups
