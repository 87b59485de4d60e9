"""
Test suite for PerformanceConfig.

Tests the search state machine, revalidation and persistence.
"""
import pytest
import torch

from convselect.applicability import ApplicabilityFilter
from convselect.exceptions import ConfigInvariantError
from convselect.perf_config import ConfigState, PerformanceConfig
from fixtures.conv import FakeCandidate, make_catalog, make_problem


def _filter(candidates, dtype=torch.int8):
    return ApplicabilityFilter(make_catalog(candidates, dtype=dtype))


class TestHeuristicInit:
    """Tests for heuristic_init()."""

    def test_starts_uninitialized(self):
        config = PerformanceConfig()
        assert config.state is ConfigState.UNINITIALIZED
        assert config.kernel_id is None
        assert config.applicable == ()

    def test_selects_first_applicable_in_catalog_order(self):
        flt = _filter([
            FakeCandidate("k0", False),
            FakeCandidate("k1"),
            FakeCandidate("k2", False),
            FakeCandidate("k3"),
        ])
        config = PerformanceConfig()
        config.heuristic_init(make_problem(), flt)

        assert config.kernel_id == "k1"
        assert config.index == 0
        assert config.applicable == ("k1", "k3")
        assert config.state is ConfigState.POPULATED

    def test_single_applicable_is_exhausted(self):
        config = PerformanceConfig()
        config.heuristic_init(make_problem(), _filter([FakeCandidate("k0")]))
        assert config.state is ConfigState.EXHAUSTED

    def test_empty_catalog_raises(self):
        with pytest.raises(ConfigInvariantError, match="no candidates"):
            PerformanceConfig().heuristic_init(make_problem(), _filter([]))

    def test_no_applicable_raises(self):
        flt = _filter([FakeCandidate("k0", False)])
        with pytest.raises(ConfigInvariantError) as exc_info:
            PerformanceConfig().heuristic_init(make_problem(), flt)
        assert exc_info.value.problem == make_problem().summary()

    def test_uninstantiated_dtype_raises(self):
        flt = _filter([FakeCandidate("k0")], dtype=torch.float32)
        problem = make_problem(in_dtype=torch.float32)
        with pytest.raises(ConfigInvariantError, match="No instantiation"):
            PerformanceConfig().heuristic_init(problem, flt)

    def test_reinit_overwrites_persisted_identity(self):
        config = PerformanceConfig("k9")
        config.heuristic_init(make_problem(), _filter([FakeCandidate("k0")]))
        assert config.kernel_id == "k0"


class TestAdvance:
    """Tests for stepping through the applicable list."""

    def test_visits_every_applicable_once_in_order(self):
        ids = [f"k{i}" for i in range(5)]
        config = PerformanceConfig()
        config.heuristic_init(make_problem(), _filter([FakeCandidate(k) for k in ids]))

        visited = [config.kernel_id]
        while config.advance():
            visited.append(config.kernel_id)

        assert visited == ids
        assert config.state is ConfigState.EXHAUSTED

    def test_advance_when_exhausted_does_not_mutate(self):
        config = PerformanceConfig()
        config.heuristic_init(
            make_problem(), _filter([FakeCandidate("k0"), FakeCandidate("k1")])
        )
        assert config.advance() is True
        assert config.advance() is False
        assert config.kernel_id == "k1"
        assert config.index == 1

    def test_advance_uninitialized(self):
        config = PerformanceConfig()
        assert config.advance() is False
        assert config.kernel_id is None

    def test_set_next_value(self):
        flt = _filter([FakeCandidate("k0"), FakeCandidate("k1")])
        config = PerformanceConfig()

        assert config.set_next_value(make_problem(), flt) is True
        assert config.kernel_id == "k0"
        assert config.set_next_value(make_problem(), flt) is True
        assert config.kernel_id == "k1"
        assert config.set_next_value(make_problem(), flt) is False

    def test_is_valid_value(self):
        config = PerformanceConfig()
        assert not config.is_valid_value()
        config.heuristic_init(make_problem(), _filter([FakeCandidate("k0")]))
        assert config.is_valid_value()


class TestIsValid:
    """Revalidation against the live catalog."""

    def test_valid_after_init(self):
        flt = _filter([FakeCandidate("k0")])
        config = PerformanceConfig()
        config.heuristic_init(make_problem(), flt)
        assert config.is_valid(make_problem(), flt)

    def test_persisted_identity_valid_in_reordered_catalog(self):
        original = _filter([FakeCandidate("k0"), FakeCandidate("k1"), FakeCandidate("k2")])
        config = PerformanceConfig()
        config.heuristic_init(make_problem(), original)
        config.advance()
        restored = PerformanceConfig.from_json(config.to_json())

        rebuilt = _filter([FakeCandidate("k2"), FakeCandidate("k1"), FakeCandidate("k0")])
        assert restored.is_valid(make_problem(), rebuilt)
        assert restored.kernel_id == "k1"

    def test_stale_after_unregister(self):
        registry = make_catalog([FakeCandidate("k0"), FakeCandidate("k1")])
        flt = ApplicabilityFilter(registry)
        config = PerformanceConfig("k1")

        registry.unregister("k1", torch.int8, flt.family)
        assert config.is_valid(make_problem(), flt) is False

    def test_invalid_when_probe_rejects(self):
        flt = _filter([FakeCandidate("k0", accepts=lambda args, dtype: args.input.extents[0] == 1)])
        config = PerformanceConfig("k0")
        assert config.is_valid(make_problem(), flt)
        assert not config.is_valid(make_problem(groups=2), flt)

    def test_invalid_without_identity(self):
        assert not PerformanceConfig().is_valid(make_problem(), _filter([FakeCandidate("k0")]))

    def test_invalid_for_uninstantiated_dtype(self):
        flt = _filter([FakeCandidate("k0")], dtype=torch.float16)
        config = PerformanceConfig("k0")
        assert not config.is_valid(make_problem(in_dtype=torch.float16), flt)


class TestIdentitySemantics:
    """Equality and persistence use the identity only."""

    def test_equality_ignores_scaffolding(self):
        flt = _filter([FakeCandidate("k0"), FakeCandidate("k1")])
        searched = PerformanceConfig()
        searched.heuristic_init(make_problem(), flt)

        assert searched == PerformanceConfig("k0")
        assert searched != PerformanceConfig("k1")

    def test_not_equal_to_other_types(self):
        assert PerformanceConfig("k0") != "k0"

    def test_unhashable_because_advance_changes_identity(self):
        config = PerformanceConfig()
        config.heuristic_init(
            make_problem(), _filter([FakeCandidate("k0"), FakeCandidate("k1")])
        )
        with pytest.raises(TypeError):
            _ = {config}
        with pytest.raises(TypeError):
            hash(config)

    def test_identity_keys_survive_advance(self):
        config = PerformanceConfig()
        config.heuristic_init(
            make_problem(), _filter([FakeCandidate("k0"), FakeCandidate("k1")])
        )
        timings = {config.kernel_id: 2.0}
        config.advance()
        timings[config.kernel_id] = 1.0
        assert timings == {"k0": 2.0, "k1": 1.0}

    def test_to_dict_holds_identity_only(self):
        config = PerformanceConfig()
        config.heuristic_init(make_problem(), _filter([FakeCandidate("k0")]))
        assert config.to_dict() == {"kernel_id": "k0"}

    def test_json_round_trip(self):
        restored = PerformanceConfig.from_json(PerformanceConfig("k7").to_json())
        assert restored == PerformanceConfig("k7")
        assert restored.state is ConfigState.UNINITIALIZED

    def test_repr(self):
        assert "k0" in repr(PerformanceConfig("k0"))
