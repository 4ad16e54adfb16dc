"""Arena geometry and tuning shared with the front end.

The client draws with the same numbers, so these are not configurable.
"""

GAME_WIDTH = 600
GAME_HEIGHT = 400
GOAL_WIDTH = 10
GOAL_HEIGHT = 100
GOAL_TOP = (GAME_HEIGHT - GOAL_HEIGHT) / 2
GOAL_BOTTOM = (GAME_HEIGHT + GOAL_HEIGHT) / 2

WIN_SCORE = 10

SEATS = (1, 2)
PLAYER_RADIUS = 20
PUCK_RADIUS = 10
LEASH_MARGIN = 5

# Seat -> starting position; seat 1 defends the left goal
START_POSITIONS = {
    1: (100.0, 200.0),
    2: (500.0, 200.0),
}
PUCK_START = (GAME_WIDTH / 2, GAME_HEIGHT / 2)

# Direction the puck is held in when the holder has no usable pointer
DEFAULT_FACING = {
    1: (1.0, 0.0),
    2: (-1.0, 0.0),
}

PUCK_FRICTION = 0.99
PLAYER_FRICTION = 0.9
BASE_SPEED = 1.0

COLLISION_DAMPING = 0.5
COMBINED_MASS = 2.0

JOLT_IMPULSE = 15.0
JOLT_COOLDOWN_SEC = 1.0
SPEED_NORMAL = 1.0
SPEED_REDUCED = 0.7
SPEED_PENALTY_SEC = 1.5

# Largest accepted component per client message; anything bigger is dropped
MAX_MOVE_COMPONENT = 5.0
MAX_SHOT_COMPONENT = 50.0
MAX_POINTER_COORD = 10000.0
