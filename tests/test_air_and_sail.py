import pytest

from sora_engine.air import resolve_air_risk, step_down
from sora_engine.errors import IncompleteAssessment, InvalidCategory
from sora_engine.models import TacticalMitigationSelection
from sora_engine.sail import OutOfScope, highest_sail, resolve_sail
from sora_engine.tables import ARC, SAIL, SAIL_MATRIX, Robustness, TacticalMitigationType


def test_vlos_high_steps_arc_b_to_a() -> None:
    tmpr = TacticalMitigationSelection(enabled=True, type="VLOS", robustness="high")
    assert resolve_air_risk("ARC-b", tmpr) is ARC.A


def test_disabled_or_missing_tmpr_keeps_initial_arc() -> None:
    assert resolve_air_risk("ARC-c") is ARC.C
    assert resolve_air_risk("ARC-c", {"enabled": False, "type": "DAA", "robustness": "high"}) is ARC.C


def test_daa_needs_medium_robustness() -> None:
    assert resolve_air_risk("ARC-d", {"enabled": True, "type": "DAA", "robustness": "low"}) is ARC.D
    assert resolve_air_risk("ARC-d", {"enabled": True, "type": "DAA", "robustness": "medium"}) is ARC.B


def test_residual_arc_never_below_a() -> None:
    for arc in ARC:
        for tmpr_type in TacticalMitigationType:
            for robustness in Robustness:
                tmpr = {"enabled": True, "type": tmpr_type, "robustness": robustness}
                residual = resolve_air_risk(arc, tmpr)
                assert 0 <= residual.rank <= arc.rank


def test_step_down_absorbs_excess() -> None:
    assert step_down("ARC-b", 5) is ARC.A
    with pytest.raises(ValueError):
        step_down("ARC-b", -1)


def test_enabled_tmpr_without_type_is_incomplete() -> None:
    with pytest.raises(IncompleteAssessment):
        resolve_air_risk("ARC-b", {"enabled": True, "robustness": "low"})
    with pytest.raises(InvalidCategory):
        resolve_air_risk("ARC-b", {"enabled": True, "type": "radar", "robustness": "low"})


def test_grc_seven_resolves_from_matrix() -> None:
    assert resolve_sail(7, "ARC-b") is SAIL_MATRIX[7][ARC.B]
    assert resolve_sail(7, "ARC-b") is SAIL.VI


def test_grc_eight_is_out_of_scope() -> None:
    result = resolve_sail(8, "ARC-a")
    assert isinstance(result, OutOfScope)
    assert result.final_grc == 8
    assert "out of scope" in str(result)


def test_grc_zero_uses_first_row() -> None:
    assert resolve_sail(0, "ARC-a") is SAIL.I
    with pytest.raises(ValueError):
        resolve_sail(-1, "ARC-a")


def test_resolved_sail_monotonic() -> None:
    for arc in ARC:
        ranks = [resolve_sail(grc, arc).rank for grc in range(0, 8)]
        assert ranks == sorted(ranks)
    for grc in range(0, 8):
        ranks = [resolve_sail(grc, arc).rank for arc in ARC]
        assert ranks == sorted(ranks)


def test_highest_sail_by_rank() -> None:
    assert highest_sail([SAIL.III, SAIL.V, SAIL.II]) is SAIL.V
    assert highest_sail([]) is None


def test_bvlos_operation_keeps_initial_arc() -> None:
    for robustness in Robustness:
        tmpr = {"enabled": True, "type": "BVLOS", "robustness": robustness}
        assert resolve_air_risk("ARC-b", tmpr) is ARC.B
