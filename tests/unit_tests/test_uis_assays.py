"""Tests for in-silico ion maps and unique ion signature assays.

The workhorse example is PESSAK (2+) with one phosphate on either serine.
With singly charged b ions only, the two localizations differ in b3 alone:
b3 of PES(Phospho)SAK lies 79.966 Th above b3 of PESS(Phospho)AK, and every
other b ion is shared. The nearest foreign ion to either b3 is the other
b3, so a tolerance below 79.966 Th makes each b3 a unique ion signature
and a wider tolerance makes both ambiguous.
"""

import itertools

import pytest

from alphauis.assay.builder import (
    MS2_PRECURSOR_ANNOTATION,
    build_ion_indices,
    generate_target_assays,
    generate_decoy_assays,
    uis_transitions,
)
from alphauis.assay.ion_map import (
    generate_target_in_silico_map,
    generate_decoy_in_silico_map,
)
from alphauis.assay.swath import NO_SWATH, get_swath
from alphauis.database.decoys import FixedSeed
from alphauis.experiment import Peptide, TargetedExperiment
from alphauis.fragments.generator import peptide_precursor_mz
from alphauis.search.uis_matching import get_matching_peptidoforms

LOCALIZATIONS = ("PES(Phospho)SAK", "PESS(Phospho)AK")


def _target_only_assays(exp, config, db):
    maps = generate_target_in_silico_map(exp, config, db)
    indices = build_ion_indices(maps)
    return maps, generate_target_assays(maps, indices, config, db)


class TestTargetInSilicoMap:
    """Test target map construction."""

    def test_maps(self, phospho_peptide, b_ion_config, mod_db):
        """All localizations share the (window, sequence) key."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        maps = generate_target_in_silico_map(exp, b_ion_config, mod_db)

        assert set(maps.ion_map) == {(0, "PESSAK")}
        assert maps.sequence_map == {0: {"PESSAK": set(LOCALIZATIONS)}}
        assert [label for label, _ in maps.peptide_map[phospho_peptide.id]] == list(LOCALIZATIONS)
        # 5 b ions per localization
        assert len(maps.ion_map[(0, "PESSAK")]) == 10
        assert maps.enumerated[phospho_peptide.id] == 2
        assert maps.truncated == []

    def test_outside_windows(self, phospho_peptide, b_ion_config, mod_db):
        """Precursors outside every window share the NO_SWATH pool."""
        config = b_ion_config.evolve(swathes=((800.0, 900.0),))
        exp = TargetedExperiment(peptides=[phospho_peptide])
        maps = generate_target_in_silico_map(exp, config, mod_db)
        assert maps.windows[phospho_peptide.id] == NO_SWATH
        assert (NO_SWATH, "PESSAK") in maps.ion_map

    def test_decoy_peptides_ignored(self, phospho_peptide, b_ion_config, mod_db):
        """Existing decoy peptides are not treated as targets."""
        decoy = Peptide("DECOY_x", "KASSEP", (("Phospho", 2),), charge=2, decoy=True)
        exp = TargetedExperiment(peptides=[phospho_peptide, decoy])
        maps = generate_target_in_silico_map(exp, b_ion_config, mod_db)
        assert list(maps.peptide_map) == [phospho_peptide.id]

    def test_insufficient_sites_skipped(self, phospho_peptide, b_ion_config, mod_db):
        """Peptides that cannot host their modifications are skipped."""
        bad = Peptide("bad", "PEPTIDEK", (("Phospho", 3), ("Phospho", 5)), charge=2)
        exp = TargetedExperiment(peptides=[bad, phospho_peptide])
        maps = generate_target_in_silico_map(exp, b_ion_config, mod_db)
        assert "bad" in maps.skipped
        assert list(maps.peptide_map) == [phospho_peptide.id]

    def test_ms2_precursor_ion(self, phospho_peptide, b_ion_config, mod_db):
        """The precursor m/z is added per localization when enabled."""
        config = b_ion_config.evolve(enable_ms2_precursors=True)
        exp = TargetedExperiment(peptides=[phospho_peptide])
        maps = generate_target_in_silico_map(exp, config, mod_db)
        assert len(maps.ion_map[(0, "PESSAK")]) == 12


class TestUISSelection:
    """Test the unique ion signature decision on a controlled example."""

    def test_narrow_threshold(self, phospho_peptide, b_ion_config, mod_db):
        """Each localization gets exactly its b3 as UIS."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        config = b_ion_config.evolve(uis_mz_threshold=79.0)
        _, transitions = _target_only_assays(exp, config, mod_db)

        assert sorted(t.peptidoforms[0] for t in transitions) == sorted(LOCALIZATIONS)
        assert all(t.annotation == "b3^1" for t in transitions)
        for t in transitions:
            assert t.uis and t.identifying
            assert not t.detecting and not t.quantifying
            assert not t.decoy
            assert t.peptide_ref == phospho_peptide.id

    def test_wide_threshold(self, phospho_peptide, b_ion_config, mod_db):
        """With a tolerance covering the phosphate shift nothing is unique."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        config = b_ion_config.evolve(uis_mz_threshold=81.0)
        _, transitions = _target_only_assays(exp, config, mod_db)
        assert transitions == []

    def test_shared_ions_never_unique(self, phospho_peptide, b_ion_config, mod_db):
        """Ions common to both localizations are never selected."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        _, transitions = _target_only_assays(exp, b_ion_config, mod_db)
        assert {t.annotation for t in transitions} == {"b3^1"}

    def test_precursor_mz_per_peptidoform(self, phospho_peptide, b_ion_config, mod_db):
        """Transitions carry the peptide's precursor m/z."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        maps, transitions = _target_only_assays(exp, b_ion_config, mod_db)
        expected = dict(maps.peptide_map[phospho_peptide.id])
        for t in transitions:
            assert t.precursor_mz == expected[t.peptidoforms[0]]

    def test_unmodified_peptides_interfere(self, b_ion_config, mod_db):
        """Co-isolated peptides sharing a fragment remove each other's UIS."""
        exp = TargetedExperiment(peptides=[
            Peptide("p1", "PEPTIDEK", charge=2),
            Peptide("p2", "PEPTIDER", charge=2),
        ])
        config = b_ion_config.evolve(fragment_types=("b", "y"))
        _, transitions = _target_only_assays(exp, config, mod_db)

        annotations = {(t.peptide_ref, t.annotation) for t in transitions}
        # identical b ions up to b7
        assert not any(a.startswith("b") for _, a in annotations)
        assert ("p1", "y1^1") in annotations
        assert ("p2", "y1^1") in annotations

    def test_selected_ions_are_unique_in_window(self, phospho_peptide, b_ion_config, mod_db):
        """Every selected ion matches only its own peptidoform."""
        exp = TargetedExperiment(peptides=[phospho_peptide, Peptide("p2", "SESSAK", (("Phospho", 0),), charge=2)])
        config = b_ion_config.evolve(fragment_types=("b", "y"))
        maps, transitions = _target_only_assays(exp, config, mod_db)
        window_ions = list(maps.window_ions(0))
        for t in transitions:
            matches = get_matching_peptidoforms(t.product_mz, window_ions, config.uis_mz_threshold)
            assert matches == [t.peptidoforms[0]]


class TestDecoyAssays:
    """Test decoy maps and decoy UIS transitions."""

    def test_decoy_map_uses_target_window(self, phospho_peptide, b_ion_config, mod_db):
        """Decoy ions are stored in their target's window."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        target_maps = generate_target_in_silico_map(exp, b_ion_config, mod_db)
        decoy_maps = generate_decoy_in_silico_map(b_ion_config, target_maps, {"PESSAK": "SKAPES"}, mod_db)

        decoy = decoy_maps.target_decoy_map[phospho_peptide.id]
        assert decoy.id == "DECOY_" + phospho_peptide.id
        assert decoy.sequence == "SKAPES"
        assert decoy_maps.windows[decoy.id] == target_maps.windows[phospho_peptide.id]
        assert set(decoy_maps.ion_map) == {(0, "SKAPES")}
        assert decoy_maps.sequence_map[0]["SKAPES"] == {"S(Phospho)KAPES", "SKAPES(Phospho)"}

    def test_decoy_transitions(self, phospho_peptide, b_ion_config, mod_db):
        """Decoy UIS transitions are flagged and reference the decoy peptide."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        target_maps = generate_target_in_silico_map(exp, b_ion_config, mod_db)
        decoy_maps = generate_decoy_in_silico_map(b_ion_config, target_maps, {"PESSAK": "SKAPES"}, mod_db)
        indices = build_ion_indices(target_maps, decoy_maps)

        transitions = generate_decoy_assays(decoy_maps, indices, b_ion_config, mod_db)
        assert transitions
        assert all(t.decoy and t.uis for t in transitions)
        assert {t.peptide_ref for t in transitions} == {"DECOY_" + phospho_peptide.id}

    def test_targets_checked_against_decoys(self, phospho_peptide, b_ion_config, mod_db):
        """A decoy ion colliding with a target UIS removes it."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        target_maps = generate_target_in_silico_map(exp, b_ion_config, mod_db)
        # PSESAK reproduces both target b3 compositions
        decoy_maps = generate_decoy_in_silico_map(b_ion_config, target_maps, {"PESSAK": "PSESAK"}, mod_db)

        with_decoys = generate_target_assays(
            target_maps, build_ion_indices(target_maps, decoy_maps), b_ion_config, mod_db
        )
        without_decoys = generate_target_assays(
            target_maps, build_ion_indices(target_maps), b_ion_config, mod_db
        )
        assert len(without_decoys) == 2
        assert len(with_decoys) < len(without_decoys)


class TestUISTransitions:
    """Test the full workflow entry point."""

    def test_end_to_end(self, phospho_peptide, b_ion_config):
        """Targets and decoys are appended, decoy peptides added."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        report = uis_transitions(exp, b_ion_config)

        assert report.processed == {phospho_peptide.id: 2}
        assert report.enumerated == {phospho_peptide.id: 2}
        assert report.decoy_sequences["PESSAK"] != "PESSAK"
        assert sorted(report.decoy_sequences["PESSAK"]) == sorted("PESSAK")
        assert len(exp.transitions) == report.n_target_transitions + report.n_decoy_transitions
        assert exp.has_peptide("DECOY_" + phospho_peptide.id)
        assert all(t.peptide_ref == phospho_peptide.id for t in exp.transitions if not t.decoy)

    def test_wide_threshold_gives_nothing(self, phospho_peptide, b_ion_config):
        """Nothing is unique when the tolerance spans the whole series."""
        exp = TargetedExperiment(peptides=[phospho_peptide])
        report = uis_transitions(exp, b_ion_config.evolve(uis_mz_threshold=1000.0))
        assert report.n_target_transitions == 0
        assert report.n_decoy_transitions == 0
        assert exp.transitions == []

    def test_reproducible(self, phospho_peptide, b_ion_config):
        """A FixedSeed gives identical decoys and transitions."""
        runs = []
        for _ in range(2):
            exp = TargetedExperiment(peptides=[phospho_peptide])
            report = uis_transitions(exp, b_ion_config)
            runs.append((report.decoy_sequences, [(t.id, t.product_mz) for t in exp.transitions]))
        assert runs[0] == runs[1]

    def test_existing_transitions_kept(self, phospho_peptide, b_ion_config):
        """Generated transitions are appended, not substituted."""
        from alphauis.experiment import Transition
        existing = Transition("t0", phospho_peptide.id, 349.64, 500.0, annotation="y4^1")
        exp = TargetedExperiment(peptides=[phospho_peptide], transitions=[existing])
        uis_transitions(exp, b_ion_config)
        assert exp.transitions[0] is existing

    def test_disable_decoy_transitions(self, phospho_peptide, b_ion_config):
        """Decoys still constrain targets but produce no transitions."""
        exp_on = TargetedExperiment(peptides=[phospho_peptide])
        report_on = uis_transitions(exp_on, b_ion_config)

        exp_off = TargetedExperiment(peptides=[phospho_peptide])
        report_off = uis_transitions(exp_off, b_ion_config.evolve(disable_decoy_transitions=True))

        assert report_off.n_decoy_transitions == 0
        assert not any(t.decoy for t in exp_off.transitions)
        assert not exp_off.has_peptide("DECOY_" + phospho_peptide.id)
        assert report_off.decoy_sequences == report_on.decoy_sequences
        assert report_off.n_target_transitions == report_on.n_target_transitions

    def test_truncation(self, b_ion_config):
        """Localizations beyond the cap are reported and not processed."""
        # two phosphates over four S/T sites: C(4, 2) = 6 localizations
        peptide = Peptide("multi", "STSTAK", (("Phospho", 0), ("Phospho", 2)), charge=2)
        exp = TargetedExperiment(peptides=[peptide])
        config = b_ion_config.evolve(max_num_alternative_localizations=1)

        report = uis_transitions(exp, config)

        assert report.enumerated["multi"] == 6
        assert report.processed["multi"] == 1
        assert report.truncated == ["multi"]
        labels = {t.peptidoforms[0] for t in exp.transitions if not t.decoy}
        assert labels <= {"S(Phospho)T(Phospho)STAK"}

    def test_skipped_peptides_reported(self, phospho_peptide, b_ion_config):
        """Peptides with insufficient sites appear in the report."""
        bad = Peptide("bad", "PEPTIDEK", (("Phospho", 3), ("Phospho", 5)), charge=2)
        exp = TargetedExperiment(peptides=[bad, phospho_peptide])
        report = uis_transitions(exp, b_ion_config)
        assert "bad" in report.skipped
        assert "bad" not in report.processed

    def test_ms2_precursor_transitions(self, b_ion_config, mod_db):
        """Precursor ions can be selected when enabled."""
        exp = TargetedExperiment(peptides=[Peptide("p1", "PEPTIDEK", charge=2)])
        config = b_ion_config.evolve(enable_ms2_precursors=True, uis_mz_threshold=0.001)
        _, transitions = _target_only_assays(exp, config, mod_db)
        precursor = [t for t in transitions if t.annotation == MS2_PRECURSOR_ANNOTATION]
        assert len(precursor) == 1
        assert precursor[0].product_mz == round(precursor[0].precursor_mz, 4)

    def test_ms2_precursor_shared_with_decoy(self, b_ion_config):
        """A shuffled decoy has the same precursor m/z, so it is never unique."""
        exp = TargetedExperiment(peptides=[Peptide("p1", "PEPTIDEK", charge=2)])
        config = b_ion_config.evolve(enable_ms2_precursors=True, uis_mz_threshold=0.001)
        uis_transitions(exp, config)
        assert MS2_PRECURSOR_ANNOTATION not in {t.annotation for t in exp.transitions}

    def test_colliding_targets_keep_sites_and_window(self, b_ion_config, mod_db):
        """When every shuffle is another target, decoys remain usable permutations."""
        arrangements = sorted(''.join(p) for p in itertools.permutations("SAK"))
        peptides = [
            Peptide(f"p_{seq}", seq, (("Phospho", seq.index("S")),), charge=1)
            for seq in arrangements
        ]
        exp = TargetedExperiment(peptides=peptides)
        report = uis_transitions(exp, b_ion_config)

        assert report.skipped == {}
        swathes = b_ion_config.swathes
        for target in peptides:
            decoy = exp.get_peptide("DECOY_" + target.id)
            assert decoy.sequence == report.decoy_sequences[target.sequence]
            assert decoy.sequence != target.sequence
            assert sorted(decoy.sequence) == sorted(target.sequence)
            assert len(mod_db.modifiable_sites(decoy.sequence, "Phospho")) == \
                len(mod_db.modifiable_sites(target.sequence, "Phospho"))

            target_mz = peptide_precursor_mz(target.sequence, target.modifications, 1, mod_db)
            decoy_mz = peptide_precursor_mz(decoy.sequence, decoy.modifications, 1, mod_db)
            assert decoy_mz == pytest.approx(target_mz)
            assert get_swath(swathes, decoy_mz) == get_swath(swathes, target_mz) != NO_SWATH
