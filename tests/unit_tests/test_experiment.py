"""Tests for the targeted experiment container."""

import pytest

from alphauis.experiment import Peptide, TargetedExperiment, Transition


class TestPeptide:
    """Test immutable peptide records."""

    def test_normalization(self):
        """Lists are stored as tuples so peptides stay hashable."""
        peptide = Peptide("p", "SASK", [["Phospho", 2]], charge=2, protein_refs=["P1"])
        assert peptide.modifications == (("Phospho", 2),)
        assert peptide.protein_refs == ("P1",)
        hash(peptide)

    def test_peptidoform(self):
        assert Peptide("p", "SASK", (("Phospho", 2),)).peptidoform == "SAS(Phospho)K"

    def test_with_modifications(self):
        """A modified copy keeps everything else."""
        peptide = Peptide("p", "SASK", (("Phospho", 2),), charge=3)
        moved = peptide.with_modifications([("Phospho", 0)])
        assert moved.modifications == (("Phospho", 0),)
        assert moved.charge == 3
        assert peptide.modifications == (("Phospho", 2),)

    def test_with_modifications_docstring(self):
        assert "modifications" in Peptide.with_modifications.__doc__


class TestTargetedExperiment:
    """Test peptide lookup and grouping."""

    def test_get_peptide(self):
        exp = TargetedExperiment(peptides=[Peptide("a", "PEPK"), Peptide("b", "SASK")])
        assert exp.get_peptide("b").sequence == "SASK"
        assert exp.has_peptide("a")
        assert not exp.has_peptide("c")

    def test_missing_peptide(self):
        with pytest.raises(KeyError, match="Peptide reference not found: c"):
            TargetedExperiment().get_peptide("c")

    def test_add_peptide_updates_lookup(self):
        exp = TargetedExperiment(peptides=[Peptide("a", "PEPK")])
        assert not exp.has_peptide("b")
        exp.add_peptide(Peptide("b", "SASK"))
        assert exp.get_peptide("b").sequence == "SASK"

    def test_in_place_replacement_updates_lookup(self):
        """Replacing a list entry is seen by every lookup."""
        exp = TargetedExperiment(peptides=[Peptide("a", "PEPK"), Peptide("b", "SASK")])
        assert exp.get_peptide("b").sequence == "SASK"

        exp.peptides[1] = Peptide("c", "SSAK")
        assert exp.get_peptide("c").sequence == "SSAK"
        assert not exp.has_peptide("b")
        with pytest.raises(KeyError, match="Peptide reference not found: b"):
            exp.get_peptide("b")

    def test_same_length_edit_updates_lookup(self):
        """Editing a peptide under the same id returns the new record."""
        exp = TargetedExperiment(peptides=[Peptide("a", "PEPK")])
        exp.get_peptide("a")
        exp.peptides[0] = Peptide("a", "KPEP", charge=3)
        assert exp.get_peptide("a").sequence == "KPEP"
        assert exp.peptide_index()["a"].charge == 3

    def test_repeated_ids(self):
        """With repeated ids the first peptide is returned everywhere."""
        first, second = Peptide("a", "PEPK"), Peptide("a", "KPEP")
        exp = TargetedExperiment(peptides=[first, second, Peptide("b", "SASK")])
        assert exp.get_peptide("a") is first
        assert exp.peptide_index() == {"a": first, "b": exp.peptides[2]}

    def test_peptide_index_is_a_snapshot(self):
        """The returned index is independent of later additions."""
        exp = TargetedExperiment(peptides=[Peptide("a", "PEPK")])
        index = exp.peptide_index()
        exp.add_peptide(Peptide("b", "SASK"))
        assert set(index) == {"a"}
        assert set(exp.peptide_index()) == {"a", "b"}

    def test_transitions_by_peptide(self):
        exp = TargetedExperiment(transitions=[
            Transition("t1", "a", 500.0, 300.0),
            Transition("t2", "b", 600.0, 300.0),
            Transition("t3", "a", 500.0, 400.0),
        ])
        groups = exp.transitions_by_peptide()
        assert [t.id for t in groups["a"]] == ["t1", "t3"]
        assert [t.id for t in groups["b"]] == ["t2"]

    def test_transition_defaults(self):
        """New transitions are unannotated detecting transitions."""
        t = Transition("t1", "a", 500.0, 300.0)
        assert not t.is_annotated
        assert t.detecting and t.quantifying
        assert not t.identifying and not t.uis and not t.decoy
