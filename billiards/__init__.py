# ── Central defaults (tune here, not scattered across files) ──

# Disk
ALPHA_MAX_TOL = 1e-14
MIN_CHORD_STEP = 1e-12
START_OFFSET_RANGE = (0.15, 0.90)

# Rectangle
RECT_WIDTH = 2.0
RECT_HEIGHT = 1.0
RECT_START = (0.3, 0.4)
STEP_TOL = 1e-12
SNAP_TOL = 1e-10
HIT_TOL = 1e-9
MAX_BOUNCES = 200
MAX_BOUNCES_RANGE = (1, 5000)

# Periodic orbit search
SEARCH_SLACK = 60
RETURN_EPS = 1e-6

# Unfolding
UNFOLD_START = (RECT_WIDTH / 4, 0.0)
UNFOLD_HITS = 8
UNFOLD_HITS_RANGE = (1, 200)
UNFOLD_PERIOD = 2.4  # seconds per sweep

# Arc length / animation
ARC_EPS = 1e-12
SPEED = 0.9

# Rendering
RESOLUTION = 640
PADDING = 40
BG_COLOR = (255, 255, 255)
FPS = 60
MAX_SAVED_FRAMES = 3000

SEED = 42
