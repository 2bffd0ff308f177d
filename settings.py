"""Settings for the bead loop recognition.

This file contains settings that are used by the bead recognition pipeline.
Every tuning value was chosen empirically on bracelet photos and should be
changed with care. The settings are grouped by pipeline stage below.
"""

# Flag for enabling debug drawings (shows intermediate fields with cv2.imshow)
DEBUG_DRAWINGS = False

# ===== PREPROCESSING =====
# Gaussian kernel applied to the grayscale frame before edge detection
PREPROCESS_BLUR_KERNEL = (5, 5)

# Canny hysteresis thresholds
CANNY_LOW_THRESHOLD = 30
CANNY_HIGH_THRESHOLD = 100

# Elliptical closing kernels, applied in this order to connect the loop outline
EDGE_CLOSING_KERNELS = ((25, 25), (35, 35))

# ===== DENSITY MAP =====
# Gaussian kernel turning the connected edges into a density field
DENSITY_BLUR_KERNEL = (21, 21)

# Threshold sweep over the density field: range(start, stop, step)
DENSITY_THRESHOLD_RANGE = (1, 50, 2)

# Elliptical closing applied to every binarized density mask
MASK_CLOSING_KERNEL = (15, 15)

# Speckle removal: smooth the mask and binarize it again at the mid value
MASK_SMOOTHING_KERNEL = (9, 9)
MASK_REBINARIZE_VALUE = 127

# Contour filters
MIN_LOOP_AREA = 100
MAX_LOOP_AREA_FRACTION = 0.8  # Of the full image area

# Polygon simplification epsilon as a fraction of the contour perimeter
CONTOUR_APPROX_FRACTION = 0.02

# Contour score weights and area normalization
AREA_SCORE_WEIGHT = 0.5
CIRCULARITY_SCORE_WEIGHT = 0.3
ASPECT_RATIO_SCORE_WEIGHT = 0.2
AREA_SCORE_FRACTION = 0.4  # Of the smaller image dimension

# ===== LOOP LOCATOR =====
# Hole-filling closing kernel size as a fraction of the smaller dimension
HOLE_FILL_FRACTION = 0.1

# Seed centers: coarse grid spacing in pixels, minimum normalized density
# and the number of seeds that are kept
SEED_GRID_STEP = 10
SEED_MIN_DENSITY = 0.3
SEED_COUNT = 20

# Full grid sweep step as a fraction of the smaller dimension
CENTER_GRID_FRACTION = 0.02

# Candidate radii as fractions of the smaller dimension
MIN_RADIUS_FRACTION = 0.1
MAX_RADIUS_FRACTION = 0.4
RADIUS_STEP_FRACTION = 0.01

# Points sampled around each candidate circle
CIRCLE_SAMPLE_COUNT = 200

# ===== COLOR SAMPLER =====
# Angular steps around the loop (matches the circle sampling density)
ANGULAR_STEP_COUNT = 200

# Radial samples per angle and the band they span (fraction of the radius)
RADIAL_SAMPLE_COUNT = 20
RADIAL_BAND_FRACTION = 0.3

# Minimum density value (0-255) for a pixel to be considered a bead pixel
SAMPLE_DENSITY_GATE = 50

# ===== BEAD GROUPER =====
# HSV brightness every color is normalized to before comparing
NORMALIZED_BRIGHTNESS = 0.8

# Colors closer than this belong to the same bead unless an edge separates them
COLOR_MERGE_THRESHOLD = 40

# Edge field value treated as an edge when walking between two samples
EDGE_CROSSING_THRESHOLD = 80

# Leniency across an edge: BASE * FACTOR / (group length + 1)
EDGE_LENIENCY_BASE = 20
EDGE_LENIENCY_FACTOR = 8

# Groups shorter than this are noise
MIN_BEAD_SAMPLES = 3

# Display radius per sample of a bead
VISUAL_RADIUS_PER_SAMPLE = 2

# ===== PALETTE =====
# Letters understood by the direction-following animation and their colors
BEAD_PALETTE = {
    "R": (255, 0, 0),  # Red -> right
    "Y": (255, 255, 0),  # Yellow -> down
    "G": (0, 255, 0),  # Green -> left
    "B": (0, 0, 255),  # Blue -> up
    "K": (0, 0, 0),  # Black, no direction
    "W": (255, 255, 255),  # White, no direction
}
