"""Bead Loop Recognition using OpenCV.

This module implements the recognition of a closed loop of colored beads (for
example a bracelet) in a single image. It locates the loop through the density
of edges in the frame, fits a circle to it, samples the most vibrant color across
the loop at regular angles and groups those samples into beads. The result is the
ordered sequence of bead colors around the loop.

The pipeline runs strictly forward:
    1. Preprocessing: grayscale, smoothing and edge extraction
    2. Density Map: edge density field and threshold sweep for loop contours
    3. Loop Locator: brute-force circle fit against the density field
    4. Color Sampler: most vibrant pixel across the loop per angle
    5. Bead Grouper: sequential clustering of the samples into beads

Dependencies:
    - OpenCV (cv2): For image processing and contour analysis
    - NumPy: For numerical operations and array handling
    - scipy: For color distance calculations
    - scikit-learn: For mapping bead colors to palette letters
"""

# External dependencies
import argparse
import logging
import math
import sys
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from scipy.spatial import distance
from sklearn.metrics import pairwise_distances_argmin

# Internal dependencies
import settings
from internal_data_classes import Bead, ColorSample, DetectionResult, LoopGeometry


logger = logging.getLogger(__name__)

# Overlay colors (BGR)
BEAD_MARKER_COLOR = (107, 107, 255)  # Coral for bead outlines and number badges
LOOP_COLOR = (0, 255, 0)  # Green for the fitted loop
LABEL_COLOR = (255, 255, 255)  # White for labels and color dot outlines


class InvalidImageError(ValueError):
    """Raised when the input image cannot be processed at all."""


def validate_image(image) -> None:
    """Reject input that is not an 8-bit RGB(A) raster.

    Args:
        image: Candidate image, expected as a (height, width, 3|4) uint8 array

    Raises:
        InvalidImageError: If the image is missing, malformed or empty.
    """
    if image is None:
        raise InvalidImageError("No image was provided")
    if not isinstance(image, np.ndarray):
        raise InvalidImageError(
            f"Expected a numpy array, got {type(image).__name__}")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise InvalidImageError(
            f"Expected an RGB or RGBA image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise InvalidImageError(
            f"Expected 8-bit samples, got dtype {image.dtype}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidImageError(
            f"Image has no pixels, got shape {image.shape}")


def rgb_to_hex(red: float, green: float, blue: float) -> str:
    """Convert an RGB color to a lowercase "#rrggbb" string."""
    return "#" + "".join(f"{int(round(channel)):02x}" for channel in (red, green, blue))


def _ellipse_kernel(size: Tuple[int, int]) -> np.ndarray:
    return cv2.getStructuringElement(cv2.MORPH_ELLIPSE, tuple(size))


def preprocess_frame(image: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Turn the input image into a binary edge image with a connected loop outline.

    The process follows these steps:
    1. Grayscale Conversion: Drop the color information
    2. Smoothing: Apply a small Gaussian blur to suppress pixel noise
    3. Edge Detection: Run Canny with fixed thresholds
    4. Gap Closing: Two morphological closings with growing elliptical kernels
       so the loop outline becomes a connected ring instead of broken segments

    Args:
        image (np.ndarray): Input RGB or RGBA image.

    Returns:
        Tuple[np.ndarray, np.ndarray]: The raw Canny edge field and the
        connected (closed) edge field.
    """
    # ===== STEP 1: GRAYSCALE CONVERSION =====
    conversion = cv2.COLOR_RGBA2GRAY if image.shape[2] == 4 else cv2.COLOR_RGB2GRAY
    grayscale_frame = cv2.cvtColor(image, conversion)

    # ===== STEP 2: SMOOTHING =====
    blurred_frame = cv2.GaussianBlur(
        grayscale_frame, settings.PREPROCESS_BLUR_KERNEL, 0)

    # ===== STEP 3: EDGE DETECTION =====
    edge_field = cv2.Canny(
        blurred_frame,
        settings.CANNY_LOW_THRESHOLD,
        settings.CANNY_HIGH_THRESHOLD,
    )

    # ===== STEP 4: GAP CLOSING =====
    # Each pass bridges larger gaps between the outline segments
    connected_field = edge_field
    for kernel_size in settings.EDGE_CLOSING_KERNELS:
        connected_field = cv2.morphologyEx(
            connected_field, cv2.MORPH_CLOSE, _ellipse_kernel(kernel_size))

    return edge_field, connected_field


def build_density_field(connected_field: np.ndarray) -> np.ndarray:
    """Spread the connected edges into a continuous edge density field."""
    return cv2.GaussianBlur(connected_field, settings.DENSITY_BLUR_KERNEL, 0)


def clean_density_mask(density_field: np.ndarray, threshold: int) -> np.ndarray:
    """Binarize the density field at a threshold and remove speckle.

    Args:
        density_field (np.ndarray): Blurred edge density field.
        threshold (int): Density value a pixel must exceed to be kept.

    Returns:
        np.ndarray: Binary mask (0 or 255).
    """
    _, mask = cv2.threshold(density_field, threshold, 255, cv2.THRESH_BINARY)
    mask = cv2.morphologyEx(
        mask, cv2.MORPH_CLOSE, _ellipse_kernel(settings.MASK_CLOSING_KERNEL))

    # Smoothing and cutting at the mid value rounds off thin protrusions
    mask = cv2.GaussianBlur(mask, settings.MASK_SMOOTHING_KERNEL, 0)
    _, mask = cv2.threshold(
        mask, settings.MASK_REBINARIZE_VALUE, 255, cv2.THRESH_BINARY)
    return mask


def score_loop_contour(polygon: np.ndarray, width: int, height: int) -> float:
    """Rate how much a simplified contour looks like a bead loop.

    The score combines three properties:
    - Area: larger loops are preferred, saturating at 1
    - Circularity: 4π·area/perimeter², 1.0 for a perfect circle
    - Aspect ratio: 1.0 for a square bounding box

    Args:
        polygon (np.ndarray): Simplified contour as returned by cv2.approxPolyDP.
        width (int): Image width in pixels.
        height (int): Image height in pixels.

    Returns:
        float: Weighted score, higher is better.
    """
    area = cv2.contourArea(polygon)
    perimeter = cv2.arcLength(polygon, True)

    area_score = min(area / (settings.AREA_SCORE_FRACTION * min(width, height)), 1.0)

    # Prevent division by zero for degenerate polygons
    circularity_score = 4 * math.pi * area / perimeter ** 2 if perimeter > 0 else 0.0

    _, _, box_width, box_height = cv2.boundingRect(polygon)
    aspect_ratio_score = (
        1 - abs(1 - box_width / box_height) if box_height > 0 else 0.0
    )

    return (
        settings.AREA_SCORE_WEIGHT * area_score
        + settings.CIRCULARITY_SCORE_WEIGHT * circularity_score
        + settings.ASPECT_RATIO_SCORE_WEIGHT * aspect_ratio_score
    )


def find_loop_contour(
    connected_field: np.ndarray,
) -> Tuple[Optional[int], Optional[np.ndarray], np.ndarray]:
    """Sweep density thresholds and keep the contour that best resembles a loop.

    A loop must encircle the center of the frame. This is a simplifying
    assumption about how the bracelet is framed and rejects most background
    clutter.

    The process follows these steps:
    1. Density Field: Blur the connected edges into a continuous field
    2. Threshold Sweep: Binarize and clean the field at every threshold
    3. Contour Filtering: Reject contours that are too small, too large
       or do not contain the image center
    4. Scoring: Simplify the surviving contours and keep the best score

    Args:
        connected_field (np.ndarray): Connected edge field from preprocessing.

    Returns:
        Tuple: The winning threshold, the winning simplified contour and the
        density field. Threshold and contour are None if no contour qualifies.
    """
    height, width = connected_field.shape[:2]
    image_center = (width / 2.0, height / 2.0)
    max_area = settings.MAX_LOOP_AREA_FRACTION * width * height

    # ===== STEP 1: DENSITY FIELD =====
    density_field = build_density_field(connected_field)

    best_threshold = None
    best_contour = None
    best_score = -math.inf

    # ===== STEP 2: THRESHOLD SWEEP =====
    for threshold in range(*settings.DENSITY_THRESHOLD_RANGE):
        mask = clean_density_mask(density_field, threshold)
        contours, _ = cv2.findContours(
            mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        for contour in contours:
            # ===== STEP 3: CONTOUR FILTERING =====
            area = cv2.contourArea(contour)
            if area < settings.MIN_LOOP_AREA or area > max_area:
                continue

            # The loop has to enclose the frame's center
            if cv2.pointPolygonTest(contour, image_center, False) < 0:
                continue

            # ===== STEP 4: SCORING =====
            # Simplify the pixel boundary to suppress jitter
            epsilon = settings.CONTOUR_APPROX_FRACTION * cv2.arcLength(contour, True)
            polygon = cv2.approxPolyDP(contour, epsilon, True)
            score = score_loop_contour(polygon, width, height)

            # Strictly greater: ties keep the lowest threshold
            if score > best_score:
                best_score = score
                best_threshold = threshold
                best_contour = polygon

    if best_contour is not None:
        logger.debug(
            "Best loop contour at threshold %d with score %.3f",
            best_threshold, best_score)

    return best_threshold, best_contour, density_field


def build_loop_field(density_field: np.ndarray, threshold: int) -> np.ndarray:
    """Derive the field the loop circle is fitted against.

    The density field is binarized at the winning threshold and closed with a
    large kernel (10% of the smaller dimension) to fill holes left by occluded
    or missing beads. The mask is binarized again and averaged with the
    continuous density, so circle scores peak along the middle of the loop band
    while closed gaps still contribute.

    Args:
        density_field (np.ndarray): Blurred edge density field.
        threshold (int): Winning threshold of the contour sweep.

    Returns:
        np.ndarray: Loop field (0-255).
    """
    height, width = density_field.shape[:2]
    hole_fill_size = max(1, int(round(settings.HOLE_FILL_FRACTION * min(width, height))))

    _, mask = cv2.threshold(density_field, threshold, 255, cv2.THRESH_BINARY)
    mask = cv2.morphologyEx(
        mask, cv2.MORPH_CLOSE, _ellipse_kernel((hole_fill_size, hole_fill_size)))
    _, mask = cv2.threshold(mask, threshold, 255, cv2.THRESH_BINARY)

    return cv2.addWeighted(mask, 0.5, density_field, 0.5, 0)


def find_seed_centers(loop_field: np.ndarray) -> List[Tuple[float, float]]:
    """Pick the densest points of a coarse grid as extra circle centers.

    Args:
        loop_field (np.ndarray): Field from build_loop_field.

    Returns:
        List[Tuple[float, float]]: Up to SEED_COUNT (x, y) points, densest first.
    """
    step = settings.SEED_GRID_STEP
    grid = loop_field[::step, ::step].astype(np.float64) / 255.0

    # nonzero walks the grid row by row, the stable sort keeps that order for ties
    rows, cols = np.nonzero(grid > settings.SEED_MIN_DENSITY)
    order = np.argsort(-grid[rows, cols], kind="stable")[: settings.SEED_COUNT]

    return [(float(cols[i] * step), float(rows[i] * step)) for i in order]


def candidate_radii(min_dimension: int) -> np.ndarray:
    """Radii from MIN to MAX_RADIUS_FRACTION of the smaller dimension, ascending."""
    count = int(round(
        (settings.MAX_RADIUS_FRACTION - settings.MIN_RADIUS_FRACTION)
        / settings.RADIUS_STEP_FRACTION
    ))
    fractions = settings.MIN_RADIUS_FRACTION + settings.RADIUS_STEP_FRACTION * np.arange(count + 1)
    return fractions * min_dimension


def circle_coverage(
    loop_field: np.ndarray, center: Tuple[float, float], radii: Sequence[float]
) -> np.ndarray:
    """Compute the coverage score of concentric circles.

    Every circle is sampled at CIRCLE_SAMPLE_COUNT evenly spaced points.
    Samples outside the image are skipped.

    Args:
        loop_field (np.ndarray): Field from build_loop_field.
        center (Tuple[float, float]): (x, y) center shared by all circles.
        radii (Sequence[float]): Radii to evaluate.

    Returns:
        np.ndarray: Mean normalized density (0-1) per radius, 0 when no sample
        of a circle lies inside the image.
    """
    height, width = loop_field.shape[:2]
    angles = np.linspace(0, 2 * np.pi, settings.CIRCLE_SAMPLE_COUNT, endpoint=False)
    radii = np.asarray(radii, dtype=np.float64)[:, np.newaxis]

    xs = np.rint(center[0] + radii * np.cos(angles)).astype(np.int64)
    ys = np.rint(center[1] + radii * np.sin(angles)).astype(np.int64)
    inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)

    values = np.zeros(xs.shape, dtype=np.float64)
    values[inside] = loop_field[ys[inside], xs[inside]] / 255.0

    counts = inside.sum(axis=1)
    totals = values.sum(axis=1)
    return np.divide(totals, counts, out=np.zeros_like(totals), where=counts > 0)


def fit_loop_circle(loop_field: np.ndarray, threshold: int) -> LoopGeometry:
    """Search the circle whose circumference covers the most loop density.

    A contour-only fit is sensitive to occlusion and noise in the loop
    outline, so many circle hypotheses are scored directly against the field.

    The search follows these steps:
    1. Seed Centers: The densest points of a coarse grid
    2. Grid Centers: Every point of a full-image grid
    3. Radius Sweep: For every center, all candidate radii are scored

    Candidates are visited seeds first, then grid rows top to bottom and
    columns left to right, radii ascending. Only a strictly better score
    replaces the current best, so the first candidate wins ties.

    Args:
        loop_field (np.ndarray): Field from build_loop_field.
        threshold (int): Winning threshold, stored in the result.

    Returns:
        LoopGeometry: The best circle.
    """
    height, width = loop_field.shape[:2]
    min_dimension = min(width, height)
    radii = candidate_radii(min_dimension)

    # ===== STEP 1: SEED CENTERS =====
    centers = find_seed_centers(loop_field)

    # ===== STEP 2: GRID CENTERS =====
    grid_step = max(1, int(round(settings.CENTER_GRID_FRACTION * min_dimension)))
    centers.extend(
        (float(x), float(y))
        for y in range(0, height, grid_step)
        for x in range(0, width, grid_step)
    )

    # ===== STEP 3: RADIUS SWEEP =====
    best_center = centers[0]
    best_radius = float(radii[0])
    best_score = -1.0
    for center in centers:
        scores = circle_coverage(loop_field, center, radii)
        # argmax returns the first (smallest) radius among equal scores
        radius_index = int(np.argmax(scores))
        if scores[radius_index] > best_score:
            best_score = float(scores[radius_index])
            best_center = center
            best_radius = float(radii[radius_index])

    logger.debug(
        "Loop circle at (%.1f, %.1f) radius %.1f, coverage %.3f",
        best_center[0], best_center[1], best_radius, best_score)

    return LoopGeometry(
        center=best_center,
        radius=best_radius,
        density_threshold=int(threshold),
        score=best_score,
    )


def compute_vibrancy(color: Sequence[int]) -> float:
    """Saturation times normalized brightness of an RGB color, between 0 and 1."""
    max_channel = max(color)
    if max_channel == 0:
        return 0.0
    saturation = (max_channel - min(color)) / max_channel
    return saturation * (max_channel / 255.0)


def sample_loop_colors(
    image: np.ndarray, loop: LoopGeometry, density_field: np.ndarray
) -> List[ColorSample]:
    """Sample the most vibrant color across the loop at regular angles.

    Highlights and shadows on round beads make the geometric center of a bead
    unreliable for color. The most saturated and bright point across the loop
    is the one least affected by them.

    For every angular step, points along the radial direction through the
    loop point are inspected. Only points whose density exceeds the gate count
    as bead pixels. The gate is lower than the loop fit threshold because real
    beads sit slightly off the idealized circle.

    Args:
        image (np.ndarray): Input RGB or RGBA image.
        loop (LoopGeometry): Fitted loop.
        density_field (np.ndarray): Field used for the density gate.

    Returns:
        List[ColorSample]: Samples in increasing angle. Angles where no point
        passes the gate are skipped.
    """
    height, width = density_field.shape[:2]
    center_x, center_y = loop.center
    band = settings.RADIAL_BAND_FRACTION * loop.radius
    radial_offsets = np.linspace(-band, band, settings.RADIAL_SAMPLE_COUNT)

    samples = []
    for step_index in range(settings.ANGULAR_STEP_COUNT):
        angle = 2 * math.pi * step_index / settings.ANGULAR_STEP_COUNT
        direction_x, direction_y = math.cos(angle), math.sin(angle)

        best_sample = None
        for offset in radial_offsets:
            distance_from_center = loop.radius + offset
            pixel_x = int(round(center_x + distance_from_center * direction_x))
            pixel_y = int(round(center_y + distance_from_center * direction_y))

            # Skip points outside the image or off the loop
            if not (0 <= pixel_x < width and 0 <= pixel_y < height):
                continue
            if density_field[pixel_y, pixel_x] <= settings.SAMPLE_DENSITY_GATE:
                continue

            # Alpha is ignored for color
            color = tuple(int(channel) for channel in image[pixel_y, pixel_x, :3])
            vibrancy = compute_vibrancy(color)

            # Ties go to the point closest to the fitted circle
            if (
                best_sample is None
                or vibrancy > best_sample.vibrancy
                or (vibrancy == best_sample.vibrancy
                    and abs(offset) < abs(best_sample.radial_offset))
            ):
                best_sample = ColorSample(
                    position=(float(pixel_x), float(pixel_y)),
                    color=color,
                    vibrancy=vibrancy,
                    angle=angle,
                    radial_offset=float(offset),
                )

        if best_sample is not None:
            samples.append(best_sample)

    return samples


def normalize_brightness(color: Sequence[float]) -> Tuple[float, float, float]:
    """Set the HSV brightness of an RGB color to a fixed value.

    Hue and saturation are preserved, so two samples of the same bead under
    different lighting end up at the same color.
    """
    # Float input keeps OpenCV's HSV exact (hue in degrees, S and V in 0-1)
    pixel = np.array([[color]], dtype=np.float32) / 255.0
    hsv_pixel = cv2.cvtColor(pixel, cv2.COLOR_RGB2HSV)
    hsv_pixel[..., 2] = settings.NORMALIZED_BRIGHTNESS
    normalized = cv2.cvtColor(hsv_pixel, cv2.COLOR_HSV2RGB)[0, 0] * 255.0
    return tuple(float(channel) for channel in normalized)


def color_distance(first: Sequence[float], second: Sequence[float]) -> float:
    """Euclidean RGB distance (0-255 scale) between brightness-normalized colors."""
    return float(distance.euclidean(
        normalize_brightness(first), normalize_brightness(second)))


def crosses_edge(
    edge_field: np.ndarray,
    start: Tuple[float, float],
    end: Tuple[float, float],
) -> bool:
    """Check whether the straight segment between two points crosses an edge.

    The segment is walked in unit steps. Points outside the image are ignored.

    Args:
        edge_field (np.ndarray): Raw edge field from preprocessing.
        start (Tuple[float, float]): (x, y) start of the segment.
        end (Tuple[float, float]): (x, y) end of the segment.

    Returns:
        bool: True if any visited pixel exceeds EDGE_CROSSING_THRESHOLD.
    """
    height, width = edge_field.shape[:2]
    delta_x = end[0] - start[0]
    delta_y = end[1] - start[1]
    step_count = int(math.ceil(math.hypot(delta_x, delta_y)))

    for step_index in range(step_count + 1):
        fraction = step_index / step_count if step_count else 0.0
        pixel_x = int(round(start[0] + delta_x * fraction))
        pixel_y = int(round(start[1] + delta_y * fraction))
        if not (0 <= pixel_x < width and 0 <= pixel_y < height):
            continue
        if edge_field[pixel_y, pixel_x] > settings.EDGE_CROSSING_THRESHOLD:
            return True

    return False


def build_bead(group: List[ColorSample]) -> Bead:
    """Summarize a group of samples as one bead.

    Args:
        group (List[ColorSample]): Contiguous samples of one bead.

    Returns:
        Bead: Bead with mean position and color of the group.
    """
    positions = np.array([sample.position for sample in group], dtype=np.float64)
    colors = np.array([sample.color for sample in group], dtype=np.float64)
    angles = np.array([sample.angle for sample in group], dtype=np.float64)

    centroid = positions.mean(axis=0)
    color = tuple(int(round(channel)) for channel in colors.mean(axis=0))

    # Circular mean, a plain mean breaks for groups spanning angle 0
    angle = float(np.arctan2(np.sin(angles).mean(), np.cos(angles).mean()) % (2 * np.pi))
    if angle >= 2 * math.pi:
        angle = 0.0

    return Bead(
        centroid=(float(centroid[0]), float(centroid[1])),
        color=color,
        hex=rgb_to_hex(*color),
        sample_count=len(group),
        visual_radius=float(settings.VISUAL_RADIUS_PER_SAMPLE * len(group)),
        angle=angle,
    )


def group_samples(samples: List[ColorSample], edge_field: np.ndarray) -> List[Bead]:
    """Group angularly ordered color samples into beads.

    The samples are processed once, in order, keeping one open group:
    - Similar colors (distance below COLOR_MERGE_THRESHOLD) join the open group,
      unless an edge lies between the two samples. Across an edge the sample
      still joins if the distance is below an adaptive threshold that shrinks
      as the group grows.
    - Different colors always close the open group and start a new one.

    Groups shorter than MIN_BEAD_SAMPLES are dropped as noise.

    Args:
        samples (List[ColorSample]): Samples in increasing angle.
        edge_field (np.ndarray): Raw edge field from preprocessing.

    Returns:
        List[Bead]: Beads in the order their groups were closed (increasing angle).
    """
    if not samples:
        return []

    groups = []
    current_group = [samples[0]]

    for previous_sample, sample in zip(samples, samples[1:]):
        color_difference = color_distance(previous_sample.color, sample.color)

        if color_difference < settings.COLOR_MERGE_THRESHOLD:
            if not crosses_edge(edge_field, previous_sample.position, sample.position):
                current_group.append(sample)
                continue

            # Across an edge, long groups need ever closer colors to keep growing
            leniency = (
                settings.EDGE_LENIENCY_BASE * settings.EDGE_LENIENCY_FACTOR
                / (len(current_group) + 1)
            )
            if color_difference < leniency:
                current_group.append(sample)
                continue

        groups.append(current_group)
        current_group = [sample]

    groups.append(current_group)

    return [
        build_bead(group) for group in groups
        if len(group) >= settings.MIN_BEAD_SAMPLES
    ]


def bead_sequence_code(beads: List[Bead]) -> str:
    """Map every bead to the nearest palette letter.

    Args:
        beads (List[Bead]): Beads in loop order.

    Returns:
        str: One palette letter per bead, for example "RYGB".
    """
    if not beads:
        return ""

    letters = list(settings.BEAD_PALETTE.keys())
    palette = np.array(list(settings.BEAD_PALETTE.values()), dtype=np.float64)
    bead_colors = np.array([bead.color for bead in beads], dtype=np.float64)

    nearest = pairwise_distances_argmin(bead_colors, palette)
    return "".join(letters[index] for index in nearest)


def detect(image: np.ndarray) -> DetectionResult:
    """Detect the bead loop in an image and read its bead colors in order.

    The image is only read, never modified. Frames without a visible loop and
    loops without readable beads are normal outcomes and produce an empty or
    partial result instead of an error.

    The process follows these steps:
    1. Validation: Reject malformed input
    2. Preprocessing: Extract and connect the edges
    3. Loop Contour: Find the best loop contour across density thresholds
    4. Loop Circle: Fit the loop circle against the density field
    5. Color Sampling: Sample the most vibrant colors around the loop
    6. Bead Grouping: Group the samples into beads
    7. Visualization: (Optional) Display the intermediate fields for debugging

    Args:
        image (np.ndarray): Input RGB or RGBA image of shape (height, width, 3|4).

    Returns:
        DetectionResult: Beads, loop geometry and debug artifacts.

    Raises:
        InvalidImageError: If the image is missing or malformed.
    """
    # ===== STEP 1: VALIDATION =====
    validate_image(image)
    frame = np.ascontiguousarray(image)

    # ===== STEP 2: PREPROCESSING =====
    edge_field, connected_field = preprocess_frame(frame)

    # ===== STEP 3: LOOP CONTOUR =====
    threshold, loop_contour, density_field = find_loop_contour(connected_field)
    if loop_contour is None:
        logger.debug("No loop contour encloses the image center")
        return DetectionResult(density_field=density_field, edge_field=edge_field)

    # ===== STEP 4: LOOP CIRCLE =====
    loop_field = build_loop_field(density_field, threshold)
    loop = fit_loop_circle(loop_field, threshold)

    # ===== STEP 5: COLOR SAMPLING =====
    samples = sample_loop_colors(frame, loop, loop_field)
    if not samples:
        logger.debug("Loop found but no point passed the density gate")

    # ===== STEP 6: BEAD GROUPING =====
    beads = group_samples(samples, edge_field)
    logger.debug("%d samples grouped into %d beads", len(samples), len(beads))

    # ===== STEP 7: VISUALIZATION (OPTIONAL) =====
    if settings.DEBUG_DRAWINGS:
        cv2.imshow("Edges", edge_field)
        cv2.imshow("Loop density", loop_field)

    return DetectionResult(
        beads=beads,
        loop=loop,
        density_field=loop_field,
        edge_field=edge_field,
        samples=samples,
    )


def overlay_info(frame: np.ndarray, result: DetectionResult):
    """Overlay the fitted loop and the detected beads on a BGR frame.

    The visualization process follows these steps:
    1. Loop Visualization: Draw the fitted circle
    2. Bead Visualization: Draw a circle around every bead
    3. Labels: A numbered badge above and a color dot below every bead

    Args:
        frame (np.ndarray): BGR image to draw on
        result (DetectionResult): Detection result to visualize

    Returns:
        None: The frame is modified in-place
    """
    # ===== STEP 1: LOOP VISUALIZATION =====
    if result.loop is not None:
        cv2.circle(
            frame,
            (int(round(result.loop.center[0])), int(round(result.loop.center[1]))),
            int(round(result.loop.radius)),
            LOOP_COLOR,
            1,  # Line thickness
        )

    for bead_number, bead in enumerate(result.beads, start=1):
        bead_x = int(round(bead.centroid[0]))
        bead_y = int(round(bead.centroid[1]))
        bead_radius = int(round(bead.visual_radius))

        # ===== STEP 2: BEAD VISUALIZATION =====
        cv2.circle(frame, (bead_x, bead_y), bead_radius, BEAD_MARKER_COLOR, 3)

        # ===== STEP 3: LABELS =====
        badge_center = (bead_x, bead_y - bead_radius - 15)
        cv2.circle(frame, badge_center, 15, BEAD_MARKER_COLOR, -1)  # Filled

        label = str(bead_number)
        text_dimensions = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 2)[0]
        cv2.putText(
            frame,
            label,
            (badge_center[0] - text_dimensions[0] // 2,
             badge_center[1] + text_dimensions[1] // 2),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,  # Font scale
            LABEL_COLOR,
            2,  # Line thickness
        )

        # Bead colors are RGB, OpenCV draws BGR
        dot_center = (bead_x, bead_y + bead_radius + 15)
        bead_color_bgr = tuple(int(channel) for channel in reversed(bead.color))
        cv2.circle(frame, dot_center, 10, bead_color_bgr, -1)
        cv2.circle(frame, dot_center, 10, LABEL_COLOR, 2)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point for the bead recognition.

    Reads an image file, runs the detection and prints the beads in loop order.
    Optionally writes or shows the annotated image.

    Args:
        argv: Command line arguments, defaults to sys.argv[1:]

    Returns:
        int: Process exit status.
    """
    parser = argparse.ArgumentParser(
        description="Read the bead colors of a bracelet photo in loop order.")
    parser.add_argument("image", help="Path to the input image")
    parser.add_argument("--output", help="Write the annotated image to this path")
    parser.add_argument("--show", action="store_true",
                        help="Show the annotated image in a window")
    parser.add_argument("--verbose", action="store_true",
                        help="Log pipeline details")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # OpenCV loads BGR, the pipeline expects RGB
    frame = cv2.imread(args.image)
    if frame is None:
        print(f"Failed to read image {args.image}")
        return 1
    result = detect(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))

    if not result.loop_found:
        print("No bead loop found")
    else:
        loop = result.loop
        print(
            f"Loop at ({loop.center[0]:.1f}, {loop.center[1]:.1f}), "
            f"radius {loop.radius:.1f}, coverage {loop.score:.2f}")
        for bead_number, bead in enumerate(result.beads, start=1):
            print(
                f"{bead_number:3d}  {bead.hex}  RGB{bead.color}  "
                f"{math.degrees(bead.angle):6.1f} deg  {bead.sample_count} samples")
        print(f"Total beads detected: {len(result.beads)}")
        print("Colors in order: " + " -> ".join(result.hex_sequence))
        print(f"Bead code: {bead_sequence_code(result.beads)}")

    if args.output or args.show:
        overlay_info(frame, result)
        if args.output:
            cv2.imwrite(args.output, frame)
        if args.show:
            cv2.imshow("Bead Recognition", frame)
            cv2.waitKey(0)
            cv2.destroyAllWindows()

    return 0


if __name__ == "__main__":
    sys.exit(main())
