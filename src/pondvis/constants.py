# --- Configuration Constants ---
DEFAULT_FPS = 30
DEFAULT_RESOLUTION = (1920, 1080)
BACKGROUND_COLOR = (15, 10, 10)  # BGR, near-black blue
PERSISTENCE_FADE = 0.15  # How much of the background is painted over each frame

# Black hole lifecycle (all times in milliseconds)
DESTROY_DURATION = 4000
PERSIST_DURATION = 10000
BLACK_HOLE_FADE = 2000  # Opacity ramps down over the final stretch
CAPTURE_RADIUS_FACTOR = 1.1
AFTERBURN_RADIUS_FACTOR = 0.8

# Wormholes and respawn
RESPAWN_DELAY = 3000
WORMHOLE_FADE_WINDOW = 2000
WORMHOLE_RAMP = 1000
RESPAWN_JITTER = 20
FADE_IN_STEP = 0.005
FADE_IN_FLOOR = 0.3

# Accretion trails
TRAIL_CAPACITY = 30
TRAIL_DECAY = 0.97
TRAIL_START_ALPHA = 0.6

# Loop gesture detection
LOOP_MIN_POINTS = 20
LOOP_CLOSE_MIN = 100
LOOP_CLOSE_RATIO = 0.3
LOOP_MIN_RADIUS = 30
DRAG_THRESHOLD = 15

# Free particle forces
POINTER_RADIUS = 150
POINTER_FORCE = 30
VELOCITY_DAMPING = 0.92
EDGE_MARGIN = 50
BREATH_FORCE = 0.15
SWIRL_FORCE = 0.02
CONNECTION_DISTANCE = 80

# Ripples
RIPPLE_STRENGTH = 8
RIPPLE_GROWTH = 4
RIPPLE_DECAY = 0.015
RIPPLE_BAND = 50  # Particles this close to the wave front get pushed

# Particle palette (RGB) and screen-size scaling
PARTICLE_COLORS = [
    (100, 200, 255),
    (180, 100, 255),
    (255, 150, 200),
    (100, 255, 200),
    (255, 200, 100),
]
BASE_AREA = 1920 * 1080
BASE_PARTICLE_COUNT = 800
MIN_PARTICLE_COUNT = 250
MAX_PARTICLE_COUNT = 1100

# Audio analysis
N_FFT = 4096
HOP_LENGTH = 512
MIN_DECIBELS = -100  # Byte spectrum mapping, same range a browser analyser uses
MAX_DECIBELS = -30
BANDS = {
    "lows": (20, 250),
    "mids": (250, 4000),
    "highs": (4000, 20000),
}
# (attack, release) for each envelope follower
ENVELOPE_RATES = {
    "lows": (0.08, 0.015),
    "mids": (0.03, 0.008),
    "highs": (0.1, 0.02),
    "overall": (0.05, 0.01),
}
ENVELOPE_SCALE = 150
DEFAULT_AUDIO_THRESHOLD = 30
MIN_AUDIO_THRESHOLD = 5
MAX_AUDIO_THRESHOLD = 100
CALIBRATION_DURATION = 2.5  # seconds of audio sampled for the noise floor
CALIBRATION_MARGIN = 10
