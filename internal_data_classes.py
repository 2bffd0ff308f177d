"""Bead Recognition Data Classes Module

This module defines the core data structures used in the bead recognition system.
It contains dataclasses that represent the fitted loop, the colors sampled around
it and the beads that are grouped from those samples.

Dependencies:
    - dataclasses: For the @dataclass decorator
    - typing: For type annotations
    - numpy: For the scalar fields kept as debug artifacts
"""

from dataclasses import dataclass, field
from typing import Tuple, List, Optional
import numpy as np


@dataclass(frozen=True)
class LoopGeometry:
    """Represents the best-fit circular loop of a frame.

    Attributes:
        center: (x, y) coordinates of the circle center in the image
        radius: Radius of the circle in pixels
        density_threshold: Density threshold that produced the winning contour
        score: Mean normalized density along the circle (coverage score)
    """

    center: Tuple[float, float]  # (x, y) coordinates
    radius: float
    density_threshold: int
    score: float


@dataclass(frozen=True)
class ColorSample:
    """Represents the most vibrant pixel found across the loop at one angle.

    Attributes:
        position: (x, y) coordinates of the sampled pixel
        color: (r, g, b) color of the sampled pixel
        vibrancy: Saturation times normalized brightness, between 0 and 1
        angle: Angle around the loop center in radians, in [0, 2π)
        radial_offset: Distance from the fitted circle along the radius
    """

    position: Tuple[float, float]
    color: Tuple[int, int, int]
    vibrancy: float
    angle: float
    radial_offset: float


@dataclass(frozen=True)
class Bead:
    """Represents a detected bead, a run of similarly colored samples.

    Attributes:
        centroid: Mean (x, y) position of the member samples
        color: Mean (r, g, b) color of the member samples
        hex: Color as a lowercase "#rrggbb" string
        sample_count: Number of samples grouped into this bead (at least 3)
        visual_radius: Radius used for drawing the bead marker
        angle: Angular position of the bead around the loop in radians
    """

    centroid: Tuple[float, float]
    color: Tuple[int, int, int]
    hex: str
    sample_count: int
    visual_radius: float
    angle: float


@dataclass(eq=False)
class DetectionResult:
    """Represents the outcome of one detection run.

    An empty result (no loop, no beads) is a normal outcome for frames that do
    not show a closed bead loop.

    Attributes:
        beads: Beads in angular order around the loop
        loop: Fitted loop, or None if no loop was found
        density_field: Field the loop was fitted and sampled against (debug
            artifact). When a loop is found this is the loop field, the
            hole-filled mask averaged with the edge density. When no loop is
            found it is the plain edge density field of the threshold sweep.
        edge_field: Raw edge field used for edge crossing checks (debug artifact)
        samples: Raw color samples in angular order (debug artifact)
    """

    beads: List[Bead] = field(default_factory=list)
    loop: Optional[LoopGeometry] = None
    density_field: Optional[np.ndarray] = None
    edge_field: Optional[np.ndarray] = None
    samples: List[ColorSample] = field(default_factory=list)

    @property
    def loop_found(self) -> bool:
        """Whether a loop was located in the frame."""
        return self.loop is not None

    @property
    def hex_sequence(self) -> List[str]:
        """Get the bead colors in loop order.

        Returns:
            The hex color of every bead, in angular order
        """
        return [bead.hex for bead in self.beads]
