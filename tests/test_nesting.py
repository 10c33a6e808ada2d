"""Tests for the slab nesting service."""

import pytest

from slabnest.config import Settings
from slabnest.nesting.nester import (
    NestingConfig,
    NestingResult,
    NestingStrategy,
    SlabNester,
    create_nester,
    nest_shapes,
)
from slabnest.shapes.model import Circle, LShape, Rectangle, Slab, Triangle


class TestNestingStrategy:
    """Tests for NestingStrategy enum."""

    def test_strategy_values(self):
        """Test strategy values."""
        assert NestingStrategy.QUICK.value == "quick"
        assert NestingStrategy.PACK.value == "pack"
        assert NestingStrategy.OPTIMIZE.value == "optimize"


class TestNestingConfig:
    """Tests for NestingConfig dataclass."""

    def test_default_config(self):
        """Test default configuration."""
        config = NestingConfig()

        assert config.slab_width == 80.0
        assert config.slab_height == 60.0
        assert config.spacing == 1.0
        assert config.edge_margin == 1.0
        assert config.min_spacing == 0.5
        assert config.strategy == NestingStrategy.OPTIMIZE
        assert config.allow_rotation is True

    def test_custom_config(self):
        """Test custom configuration."""
        config = NestingConfig(
            slab_width=120.0,
            slab_height=90.0,
            spacing=2.0,
            strategy=NestingStrategy.QUICK,
        )

        assert config.slab == Slab("slab", 120.0, 90.0)
        assert config.spacing == 2.0
        assert config.strategy == NestingStrategy.QUICK

    def test_to_dict(self):
        """Test config serialization."""
        config = NestingConfig(strategy=NestingStrategy.PACK)
        d = config.to_dict()

        assert d["slab_width"] == 80.0
        assert d["strategy"] == "pack"

    def test_from_dict(self):
        """Test config deserialization."""
        data = {
            "slab_width": 100.0,
            "slab_height": 50.0,
            "strategy": "quick",
        }
        config = NestingConfig.from_dict(data)

        assert config.slab_width == 100.0
        assert config.strategy == NestingStrategy.QUICK
        assert config.spacing == 1.0

    def test_from_settings(self):
        """Test config built from settings with overrides."""
        settings = Settings(slab_width=100, slab_height=70, margin=2, default_spacing=1.5)
        config = NestingConfig.from_settings(settings, spacing=3.0, strategy=None)

        assert config.slab_width == 100
        assert config.edge_margin == 2
        assert config.spacing == 3.0
        assert config.strategy == NestingStrategy.OPTIMIZE

    def test_for_slab(self):
        """Test slab-specific config."""
        config = NestingConfig.for_slab(Slab("s", 90, 45), spacing=2.0)

        assert config.slab_width == 90
        assert config.slab_height == 45
        assert config.spacing == 2.0


class TestNestingResult:
    """Tests for NestingResult dataclass."""

    def test_success_result(self):
        """Test successful result."""
        result = NestingResult(
            success=True,
            placed_shapes=[Rectangle("a", 10, 10, x=1, y=1)],
            efficiency=25.0,
        )

        assert result.success is True
        assert len(result.placed_shapes) == 1
        assert result.all_placed is True

    def test_failure_result(self):
        """Test failure result."""
        result = NestingResult(
            success=False,
            error_message="No shapes provided",
        )

        assert result.success is False
        assert result.all_placed is False
        assert result.error_message == "No shapes provided"

    def test_to_dict(self):
        """Test result serialization."""
        result = NestingResult(
            success=True,
            placed_shapes=[Rectangle("a", 10, 10)],
            unplaced_ids=["b"],
            efficiency=50.0,
        )
        d = result.to_dict()

        assert d["success"] is True
        assert len(d["placed_shapes"]) == 1
        assert d["unplaced_ids"] == ["b"]


class TestSlabNester:
    """Tests for SlabNester class."""

    @pytest.fixture
    def nester(self):
        """Create a slab nester."""
        return SlabNester()

    @pytest.fixture
    def test_shapes(self):
        """Create a mixed set of pieces."""
        return [
            Rectangle("r1", 20, 10),
            Rectangle("r2", 15, 15),
            LShape("l1", 20, 20, 5, 5, corner="tl"),
            Triangle("t1", 10, 12),
            Circle("c1", 5),
        ]

    def test_init(self, nester):
        """Test nester initialization."""
        assert nester.config is not None
        assert nester.config.slab_width == 80.0

    def test_nest_no_shapes(self, nester):
        """Test nesting with no shapes."""
        result = nester.nest([])

        assert result.success is False
        assert "No shapes" in result.error_message
        assert result.total_area == 4800

    def test_nest_optimize(self, nester, test_shapes):
        """Test the default strategy places every piece."""
        result = nester.nest(test_shapes)

        assert result.success is True
        assert result.all_placed is True
        assert result.valid is True
        assert result.strategy is not None
        assert 0 < result.efficiency <= 100

    def test_nest_quick(self, test_shapes):
        """Test quick arrangement keeps input order on the first row."""
        nester = SlabNester(NestingConfig(strategy=NestingStrategy.QUICK))
        result = nester.nest(test_shapes[:2])

        assert result.success is True
        assert [(s.x, s.y) for s in result.placed_shapes] == [(1, 1), (22, 1)]
        assert result.strategy is None

    def test_nest_quick_drops_overflow(self):
        """Test quick arrangement reports shapes past the slab as unplaced."""
        nester = SlabNester(NestingConfig(strategy=NestingStrategy.QUICK))
        shapes = [Rectangle(f"r{i}", 70, 25) for i in range(3)]
        result = nester.nest(shapes)

        assert result.success is True
        assert result.unplaced_ids == ["r2"]
        assert result.valid is True

    def test_nest_pack(self, test_shapes):
        """Test single-pass packing."""
        nester = SlabNester(NestingConfig(strategy=NestingStrategy.PACK, allow_rotation=False))
        result = nester.nest(test_shapes)

        assert result.success is True
        assert result.all_placed is True
        assert result.strategy == "area-desc"

    def test_nest_overfull(self, nester):
        """Test shapes that do not fit are reported."""
        shapes = [Rectangle(f"r{i}", 30, 30) for i in range(11)]
        result = nester.nest(shapes)

        assert result.success is True
        assert len(result.placed_shapes) < 11
        assert len(result.placed_shapes) + len(result.unplaced_ids) == 11

    def test_nest_invalid_shape(self, nester):
        """Test invalid dimensions produce a failure result."""
        result = nester.nest([Rectangle("bad", -1, 10)])

        assert result.success is False
        assert "bad" in result.error_message

    def test_nest_duplicate_ids(self, nester):
        """Test duplicate ids produce a failure result."""
        result = nester.nest([Rectangle("a", 1, 1), Rectangle("a", 2, 2)])

        assert result.success is False
        assert "Duplicate" in result.error_message

    def test_nest_invalid_legs(self, nester):
        """Test L-shape legs are re-checked."""
        result = nester.nest([LShape("l", 10, 10, 12, 3)])

        assert result.success is False

    def test_progress_callback(self, nester, test_shapes):
        """Test progress is forwarded from the optimizer."""
        reports = []
        nester.nest(test_shapes, on_progress=lambda p, best: reports.append(p))

        assert len(reports) == 14
        assert reports[-1] == pytest.approx(100)

    def test_nest_result_has_positions(self, nester, test_shapes):
        """Test that placed shapes sit inside the slab margin."""
        result = nester.nest(test_shapes)

        for shape in result.placed_shapes:
            assert shape.x >= 1
            assert shape.y >= 1

    def test_export_layout(self, nester, test_shapes):
        """Test layout export."""
        result = nester.nest(test_shapes)
        text = nester.export_layout(result)

        assert "; Slab layout" in text
        assert "; Efficiency:" in text
        assert "r1" in text

    def test_export_layout_unplaced(self):
        """Test unplaced shapes are listed."""
        nester = SlabNester()
        result = NestingResult(success=True, unplaced_ids=["big"])
        text = nester.export_layout(result)

        assert "; Unplaced shapes (1):" in text
        assert "big" in text


class TestConvenienceFunctions:
    """Tests for convenience functions."""

    def test_create_nester(self):
        """Test nester creation."""
        nester = create_nester(slab_width=100.0, strategy="quick")

        assert nester.config.slab_width == 100.0
        assert nester.config.strategy == NestingStrategy.QUICK

    def test_nest_shapes(self):
        """Test nesting on a given slab."""
        result = nest_shapes([Rectangle("a", 10, 10)], Slab("s", 30, 30), spacing=1.0)

        assert result.success is True
        assert result.all_placed is True
        assert result.total_area == 900
