"""Slab nesting service.

Wraps the row packer, the bin packer and the optimizer behind one
configuration object and reports placements, unplaced shapes and
slab utilization.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence

from slabnest.config import Settings
from slabnest.nesting.arrange import arrange
from slabnest.nesting.bin_packer import pack_shapes
from slabnest.nesting.collision import is_valid_arrangement, within_bounds
from slabnest.nesting.optimizer import (
    STRATEGIES,
    ProgressCallback,
    calculate_efficiency,
    optimize,
    used_area,
)
from slabnest.shapes.model import Shape, ShapeValidationError, Slab, validate_shapes
from slabnest.utils import get_logger

logger = get_logger("nesting.nester")


class NestingStrategy(str, Enum):
    """Nesting strategies."""
    QUICK = "quick"  # Row-by-row, input order
    PACK = "pack"  # One max-rects pass, largest area first
    OPTIMIZE = "optimize"  # Full strategy search


@dataclass
class NestingConfig:
    """Configuration for slab nesting."""
    # Slab dimensions (cm)
    slab_width: float = 80.0
    slab_height: float = 60.0

    # Spacing
    spacing: float = 1.0  # Requested gap between shapes
    edge_margin: float = 1.0  # Margin from slab edges
    min_spacing: float = 0.5  # Gap never goes below this

    # Strategy
    strategy: NestingStrategy = NestingStrategy.OPTIMIZE

    # Options
    allow_rotation: bool = True  # 90 degree turns for the PACK strategy
    iteration_delay: float = 0.0  # Pause between optimizer iterations

    @property
    def slab(self) -> Slab:
        return Slab(id="slab", width=self.slab_width, height=self.slab_height)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "slab_width": self.slab_width,
            "slab_height": self.slab_height,
            "spacing": self.spacing,
            "edge_margin": self.edge_margin,
            "min_spacing": self.min_spacing,
            "strategy": self.strategy.value,
            "allow_rotation": self.allow_rotation,
            "iteration_delay": self.iteration_delay,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NestingConfig":
        """Create from dictionary."""
        return cls(
            slab_width=data.get("slab_width", 80.0),
            slab_height=data.get("slab_height", 60.0),
            spacing=data.get("spacing", 1.0),
            edge_margin=data.get("edge_margin", 1.0),
            min_spacing=data.get("min_spacing", 0.5),
            strategy=NestingStrategy(data.get("strategy", "optimize")),
            allow_rotation=data.get("allow_rotation", True),
            iteration_delay=data.get("iteration_delay", 0.0),
        )

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "NestingConfig":
        """Create from application settings, with keyword overrides."""
        config = cls(
            slab_width=settings.slab_width,
            slab_height=settings.slab_height,
            spacing=settings.default_spacing,
            edge_margin=settings.margin,
            min_spacing=settings.min_spacing,
            iteration_delay=settings.iteration_delay,
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)
        return config

    @classmethod
    def for_slab(cls, slab: Slab, spacing: float = 1.0, **kwargs) -> "NestingConfig":
        """Create config for a specific slab."""
        return cls(slab_width=slab.width, slab_height=slab.height, spacing=spacing, **kwargs)


@dataclass
class NestingResult:
    """Result of a nesting run."""
    success: bool
    placed_shapes: List[Shape] = field(default_factory=list)
    unplaced_ids: List[str] = field(default_factory=list)
    efficiency: float = 0.0  # Percentage of slab covered
    used_area: float = 0.0
    total_area: float = 0.0
    strategy: Optional[str] = None  # Winning sort order, when optimizing
    valid: bool = True  # Layout passed the collision/bounds check
    processing_time: float = 0.0
    error_message: Optional[str] = None

    @property
    def all_placed(self) -> bool:
        return self.success and not self.unplaced_ids

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "placed_shapes": [s.to_dict() for s in self.placed_shapes],
            "unplaced_ids": self.unplaced_ids,
            "efficiency": self.efficiency,
            "used_area": self.used_area,
            "total_area": self.total_area,
            "strategy": self.strategy,
            "valid": self.valid,
            "processing_time": self.processing_time,
            "error_message": self.error_message,
        }


class SlabNester:
    """
    Nesting service for one slab configuration.

    Arranges cut pieces on the slab with the configured strategy and
    reports how much of the slab they use.
    """

    def __init__(self, config: Optional[NestingConfig] = None):
        """
        Initialize slab nester.

        Args:
            config: Nesting configuration
        """
        self.config = config or NestingConfig()

    def nest(
        self,
        shapes: Sequence[Shape],
        on_progress: Optional[ProgressCallback] = None,
    ) -> NestingResult:
        """
        Nest shapes on the slab.

        Args:
            shapes: Shapes to place
            on_progress: Progress callback, used by the OPTIMIZE strategy

        Returns:
            Nesting result with shape placements
        """
        start_time = datetime.now()

        if not shapes:
            return NestingResult(
                success=False,
                error_message="No shapes provided",
                total_area=self.config.slab_width * self.config.slab_height,
            )

        try:
            shapes = validate_shapes(shapes)
            slab = self.config.slab

            placed, strategy = self._place_shapes(shapes, slab, on_progress)

            placed_ids = {s.id for s in placed}
            unplaced = [s.id for s in shapes if s.id not in placed_ids]
            valid = is_valid_arrangement(placed, slab, self._gap, self.config.edge_margin)
            if not valid:
                logger.warning("Layout has collisions or shapes outside the slab")

            return NestingResult(
                success=True,
                placed_shapes=placed,
                unplaced_ids=unplaced,
                efficiency=calculate_efficiency(placed, slab),
                used_area=used_area(placed),
                total_area=slab.width * slab.height,
                strategy=strategy,
                valid=valid,
                processing_time=(datetime.now() - start_time).total_seconds(),
            )

        except ShapeValidationError as e:
            logger.error(f"Invalid shapes: {e}")
            return NestingResult(
                success=False,
                error_message=str(e),
                processing_time=(datetime.now() - start_time).total_seconds(),
            )
        except Exception as e:
            logger.error(f"Nesting error: {e}")
            return NestingResult(
                success=False,
                error_message=str(e),
                processing_time=(datetime.now() - start_time).total_seconds(),
            )

    @property
    def _gap(self) -> float:
        return max(self.config.spacing, self.config.min_spacing)

    def _place_shapes(self, shapes, slab, on_progress):
        """Run the configured strategy; returns (placed shapes, strategy name)."""
        config = self.config

        if config.strategy == NestingStrategy.QUICK:
            placed = arrange(
                shapes,
                config.spacing,
                slab,
                margin=config.edge_margin,
                min_spacing=config.min_spacing,
            )
            # Rows that ran off the slab do not count as placed
            fitting = [s for s in placed if self._fits(s, slab)]
            return fitting, None

        if config.strategy == NestingStrategy.PACK:
            largest_first = STRATEGIES[0]
            packed = pack_shapes(
                largest_first.apply(shapes),
                config.spacing,
                slab,
                allow_rotation=config.allow_rotation,
                margin=config.edge_margin,
                min_spacing=config.min_spacing,
            )
            return packed.placed, largest_first.name

        result = optimize(
            shapes,
            config.spacing,
            slab,
            on_progress=on_progress,
            delay=config.iteration_delay,
            margin=config.edge_margin,
            min_spacing=config.min_spacing,
        )
        return result.shapes, result.strategy

    def _fits(self, shape: Shape, slab: Slab) -> bool:
        return within_bounds(shape, slab, self.config.edge_margin)

    def export_layout(self, result: NestingResult) -> str:
        """Export layout as text description."""
        lines = [
            "; Slab layout",
            f"; Slab: {self.config.slab_width:g}x{self.config.slab_height:g}cm",
            f"; Efficiency: {result.efficiency:.1f}%",
            f"; Shapes placed: {len(result.placed_shapes)}",
            "",
        ]

        for i, shape in enumerate(result.placed_shapes):
            lines.append(f"; Shape {i + 1}: {shape.id} ({shape.type.value})")
            lines.append(f";   Position: ({shape.x:.1f}, {shape.y:.1f})")
            lines.append("")

        if result.unplaced_ids:
            lines.append(f"; Unplaced shapes ({len(result.unplaced_ids)}):")
            for shape_id in result.unplaced_ids:
                lines.append(f";   - {shape_id}")

        return "\n".join(lines)


# Convenience functions
def create_nester(
    slab_width: float = 80.0,
    slab_height: float = 60.0,
    spacing: float = 1.0,
    strategy: str = "optimize",
) -> SlabNester:
    """Create a slab nester with specified settings."""
    config = NestingConfig(
        slab_width=slab_width,
        slab_height=slab_height,
        spacing=spacing,
        strategy=NestingStrategy(strategy),
    )
    return SlabNester(config=config)


def nest_shapes(
    shapes: Sequence[Shape],
    slab: Slab,
    spacing: float = 1.0,
    strategy: str = "optimize",
) -> NestingResult:
    """
    Nest shapes on a slab.

    Args:
        shapes: Shapes to place
        slab: Target slab
        spacing: Gap between shapes (cm)
        strategy: Nesting strategy

    Returns:
        Nesting result
    """
    config = NestingConfig.for_slab(slab, spacing=spacing, strategy=NestingStrategy(strategy))
    nester = SlabNester(config=config)
    return nester.nest(shapes)
