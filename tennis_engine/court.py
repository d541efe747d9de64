"""Tennis court geometry and physical constants.

All values in SI units (meters, seconds, kg). Spin is carried in RPM and
converted to rad/s where the Magnus term needs it.

The court is modelled as a side view: x runs from the left baseline (0) to
the right baseline (COURT_LENGTH), y is height above the playing surface.
"""

import math

# Court dimensions (meters) -- ITF singles court
COURT_LENGTH = 23.77
NET_X = COURT_LENGTH / 2
NET_HEIGHT = 0.914  # at the centre strap

# Ball -- ITF type 2
BALL_RADIUS = 0.0335  # 6.7cm diameter
BALL_MASS = 0.057

GRAVITY = 9.81
RPM_TO_RAD_S = 2 * math.pi / 60

# Magnus term: a = k * omega * |v| / m, suppressed for a nearly stationary ball
MAGNUS_COEFFICIENT = 1.2e-4
MAGNUS_MIN_SPEED = 0.1

# Net strike
NET_ABSORPTION = 0.8  # fraction of velocity and spin removed
NET_DEFLECTION_NOISE = 0.15  # m/s, vertical jitter after a net strike
NET_DROP_SPEED = 0.5  # below this on both axes the ball drops straight down

# Ground bounce
ROLLING_DAMPING = 0.8  # horizontal velocity kept per bounce
SPIN_KICK_DIVISOR = 5000.0
SPIN_KICK_GAIN = 2.0  # m/s of forward kick per 5000 RPM of topspin
BOUNCE_SPIN_DECAY = 0.7
REST_SPEED = 0.1  # rebound below this ends the flight
MAX_BOUNCES = 10
MAX_RECORDED_BOUNCES = 3

# Launch (server side, near the left baseline)
LAUNCH_X = 1.0
LAUNCH_Y = 1.0
LAUNCH_SPEED_SCALE = 50.0 / 1000.0  # m/s per newton
LAUNCH_MAX_FORCE = 1000.0
LAUNCH_MAX_ANGLE = 90.0

# Drop test
DROP_HEIGHT = 2.0
DROP_X = NET_X / 2

# Receiving player
PLAYER_RADIUS = 0.4
PLAYER_REACH_HEIGHT = 2.5 * NET_HEIGHT
PLAYER_START_X = COURT_LENGTH - 2.0

# Return shot
RETURN_MAX_FORCE = 600.0
RETURN_MAX_SPEED = 30.0
RETURN_MIN_SPEED = 5.0
RETURN_NUDGE = 0.1  # ball is placed this far in front of the player after contact
CANCEL_SPEED_FACTOR = 0.5

# Relaunch
RELAUNCH_DELAY = 2.0
RELAUNCH_FORCE_RANGE = (200.0, 400.0)
RELAUNCH_ANGLE_RANGE = (9, 39)  # integer degrees, upper bound exclusive
RELAUNCH_SPIN_RANGE = (60.0, 600.0)

# Clock
TICK_RATE = 120  # Hz
