"""Tests for the multi-strategy optimizer."""

import pytest

from slabnest.nesting import optimizer as optimizer_module
from slabnest.nesting.collision import collides, within_bounds
from slabnest.nesting.optimizer import (
    ROTATION_MODES,
    STRATEGIES,
    OptimizationResult,
    SortStrategy,
    calculate_efficiency,
    iter_optimize,
    optimize,
    optimize_async,
    total_iterations,
    used_area,
)
from slabnest.shapes.model import Circle, LShape, Rectangle, Slab, Triangle

SLAB = Slab("slab", 80, 60)


@pytest.fixture
def mixed_shapes():
    """A mixed set of pieces that fits on the default slab."""
    return [
        Rectangle("r1", 20, 10),
        Rectangle("r2", 10, 25),
        LShape("l1", 20, 15, 6, 5, corner="tl"),
        LShape("l2", 15, 20, 5, 6, corner="br"),
        Triangle("t1", 12, 18),
        Circle("c1", 6),
        Circle("c2", 3),
    ]


class TestStrategies:
    """Tests for the sort-strategy menu."""

    def test_strategy_names(self):
        """Test the fixed strategy order."""
        assert [s.name for s in STRATEGIES] == [
            "area-desc",
            "area-asc",
            "width-desc",
            "height-desc",
            "perimeter-desc",
            "aspect-ratio",
            "mixed-strategy",
        ]

    def test_total_iterations(self):
        """Test every strategy runs with and without rotation."""
        assert ROTATION_MODES == (True, False)
        assert total_iterations() == 14

    def test_area_sorts(self):
        """Test ascending and descending area order."""
        shapes = [Rectangle("m", 5, 5), Rectangle("s", 1, 1), Rectangle("l", 10, 10)]

        assert [s.id for s in STRATEGIES[0].apply(shapes)] == ["l", "m", "s"]
        assert [s.id for s in STRATEGIES[1].apply(shapes)] == ["s", "m", "l"]

    def test_sort_is_stable(self):
        """Test ties keep input order."""
        shapes = [Rectangle("a", 5, 5), Rectangle("b", 5, 5), Rectangle("c", 5, 5)]

        for strategy in STRATEGIES:
            assert [s.id for s in strategy.apply(shapes)] == ["a", "b", "c"]

    def test_aspect_ratio_of_degenerate_shape(self):
        """Test a zero-size shape sorts without dividing by zero."""
        shapes = [Rectangle("zero", 0, 5), Rectangle("long", 10, 2)]
        ordered = STRATEGIES[5].apply(shapes)

        assert [s.id for s in ordered] == ["long", "zero"]

    def test_apply_does_not_mutate(self):
        """Test sorting returns a new list."""
        shapes = [Rectangle("s", 1, 1), Rectangle("l", 10, 10)]
        STRATEGIES[0].apply(shapes)

        assert [s.id for s in shapes] == ["s", "l"]


class TestEfficiency:
    """Tests for used_area / calculate_efficiency."""

    def test_used_area(self):
        """Test bounding-box areas are summed."""
        assert used_area([Rectangle("a", 10, 10), Circle("c", 5)]) == 200

    def test_efficiency(self):
        """Test efficiency is a percentage of the slab."""
        assert calculate_efficiency([Rectangle("a", 40, 30)], SLAB) == pytest.approx(25.0)

    def test_zero_area_slab(self):
        """Test a degenerate slab reports zero."""
        assert calculate_efficiency([Rectangle("a", 1, 1)], Slab("s", 0, 10)) == 0.0


class TestOptimize:
    """Tests for optimize()."""

    def test_empty_input(self):
        """Test empty input returns immediately."""
        calls = []
        result = optimize([], 1, SLAB, on_progress=lambda p, b: calls.append(p))

        assert result.shapes == []
        assert result.efficiency == 0
        assert result.total_area == 4800
        assert calls == []

    def test_overfull_slab(self):
        """Test eleven 30cm squares do not all fit."""
        shapes = [Rectangle(f"r{i}", 30, 30) for i in range(11)]
        result = optimize(shapes, 1, SLAB)

        assert 0 < result.placed_count < 11
        assert result.efficiency == pytest.approx(result.placed_count * 900 / 4800 * 100)

    def test_places_everything_that_fits(self, mixed_shapes):
        """Test a roomy slab takes every piece."""
        result = optimize(mixed_shapes, 1, SLAB)

        assert result.placed_count == len(mixed_shapes)
        assert result.strategy is not None
        assert 1 <= result.iteration <= 14

    def test_no_overlap_and_in_bounds(self, mixed_shapes):
        """Test the winning layout is collision-free and in bounds."""
        result = optimize(mixed_shapes, 1, SLAB)

        for shape in result.shapes:
            assert within_bounds(shape, SLAB, 1)
        for i in range(len(result.shapes)):
            for j in range(i + 1, len(result.shapes)):
                assert not collides(result.shapes[i], result.shapes[j], 0.5)

    def test_deterministic(self, mixed_shapes):
        """Test identical input gives identical output."""
        first = optimize(mixed_shapes, 1, SLAB)
        second = optimize(mixed_shapes, 1, SLAB)

        assert first.shapes == second.shapes
        assert first.efficiency == second.efficiency
        assert first.strategy == second.strategy

    def test_progress_is_monotonic(self, mixed_shapes):
        """Test progress reaches 100% and best never places fewer shapes."""
        reports = []
        optimize(mixed_shapes, 1, SLAB, on_progress=lambda p, best: reports.append((p, best.placed_count)))

        assert len(reports) == 14
        percents = [p for p, _ in reports]
        counts = [c for _, c in reports]
        assert percents == sorted(percents)
        assert percents[-1] == pytest.approx(100)
        assert counts == sorted(counts)

    def test_rotation_soundness(self, mixed_shapes):
        """Test circles and L-shapes keep their dimensions."""
        originals = {s.id: s for s in mixed_shapes}
        result = optimize(mixed_shapes, 1, SLAB)

        for shape in result.shapes:
            original = originals[shape.id]
            if isinstance(shape, Circle):
                assert shape.radius == original.radius
            if isinstance(shape, LShape):
                assert (shape.width, shape.height) == (original.width, original.height)
                assert (shape.leg_width, shape.leg_height) == (original.leg_width, original.leg_height)

    def test_efficiency_bound(self, mixed_shapes):
        """Test efficiency matches the used area and stays in range."""
        result = optimize(mixed_shapes, 1, SLAB)

        assert 0 <= result.efficiency <= 100
        assert result.efficiency == pytest.approx(used_area(result.shapes) / 4800 * 100)
        assert result.used_area == pytest.approx(used_area(result.shapes))

    def test_nothing_fits(self):
        """Test an impossible input returns the empty result."""
        result = optimize([Rectangle("huge", 200, 200)], 1, SLAB)

        assert result.shapes == []
        assert result.iteration == 0
        assert result.strategy is None
        assert result.total_area == 4800

    def test_failing_iteration_is_skipped(self, monkeypatch):
        """Test one failing packing run does not stop the search."""
        real_pack = optimizer_module.pack_shapes
        calls = {"count": 0}

        def flaky_pack(*args, **kwargs):
            calls["count"] += 1
            if calls["count"] == 1:
                raise RuntimeError("packer exploded")
            return real_pack(*args, **kwargs)

        monkeypatch.setattr(optimizer_module, "pack_shapes", flaky_pack)
        result = optimize([Rectangle("a", 10, 10)], 1, SLAB)

        assert calls["count"] == 14
        assert result.placed_count == 1
        assert result.iteration == 2

    def test_delay_sleeps_between_iterations(self, monkeypatch):
        """Test the delay is applied between iterations only."""
        sleeps = []
        monkeypatch.setattr(optimizer_module.time, "sleep", lambda s: sleeps.append(s))

        optimize([Rectangle("a", 10, 10)], 1, SLAB, delay=0.01)

        assert sleeps == [0.01] * 13

    def test_zero_spacing_places_flush_shapes(self):
        """Test shapes packed edge to edge are accepted without a minimum gap."""
        shapes = [Rectangle("a", 10, 10), Rectangle("b", 10, 10)]
        result = optimize(shapes, 0, SLAB, min_spacing=0)

        assert result.placed_count == 2
        assert not collides(result.shapes[0], result.shapes[1])
        assert all(within_bounds(s, SLAB, 1) for s in result.shapes)

    def test_result_to_dict(self):
        """Test result serialization."""
        result = OptimizationResult(shapes=[Rectangle("a", 1, 1)], efficiency=5.0, strategy="area-desc")
        d = result.to_dict()

        assert d["placed_count"] == 1
        assert d["strategy"] == "area-desc"
        assert d["shapes"][0]["id"] == "a"


class TestIterOptimize:
    """Tests for the step-wise search."""

    def test_steps(self, mixed_shapes):
        """Test one step per strategy/rotation combination."""
        steps = list(iter_optimize(mixed_shapes, 1, SLAB))

        assert [s.iteration for s in steps] == list(range(1, 15))
        assert steps[0].strategy == "area-desc"
        assert steps[0].allow_rotation is True
        assert steps[1].allow_rotation is False
        assert steps[-1].percent == pytest.approx(100)

    def test_custom_strategies(self):
        """Test a custom strategy menu."""
        strategies = [SortStrategy("by-width", lambda s: s.width)]
        steps = list(iter_optimize([Rectangle("a", 5, 5)], 1, SLAB, strategies=strategies))

        assert len(steps) == 2
        assert steps[-1].best.strategy == "by-width"

    def test_stop_early(self, mixed_shapes):
        """Test the caller can abandon the search between iterations."""
        search = iter_optimize(mixed_shapes, 1, SLAB)
        first = next(search)
        search.close()

        assert first.iteration == 1

    def test_empty(self):
        """Test empty input yields nothing."""
        assert list(iter_optimize([], 1, SLAB)) == []


class TestOptimizeAsync:
    """Tests for optimize_async()."""

    @pytest.mark.asyncio
    async def test_matches_sync(self, mixed_shapes):
        """Test the async search finds the same layout."""
        sync_result = optimize(mixed_shapes, 1, SLAB)
        async_result = await optimize_async(mixed_shapes, 1, SLAB)

        assert async_result.shapes == sync_result.shapes
        assert async_result.efficiency == sync_result.efficiency

    @pytest.mark.asyncio
    async def test_progress(self):
        """Test progress is reported for every iteration."""
        reports = []
        await optimize_async([Rectangle("a", 10, 10)], 1, SLAB, on_progress=lambda p, b: reports.append(p))

        assert len(reports) == 14

    @pytest.mark.asyncio
    async def test_empty(self):
        """Test empty input."""
        result = await optimize_async([], 1, SLAB)
        assert result.shapes == []

    @pytest.mark.asyncio
    async def test_delay_between_iterations_only(self, monkeypatch):
        """Test the async delay skips the final iteration like the sync one."""
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr(optimizer_module.asyncio, "sleep", record_sleep)
        await optimize_async([Rectangle("a", 10, 10)], 1, SLAB, delay=0.01)

        assert sleeps == [0.01] * 13
