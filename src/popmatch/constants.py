GRID_ROWS = 8
GRID_COLS = 5

# Base palette; generated and refilled tiles only ever use these.
PALETTE = ('red', 'blue', 'yellow', 'green', 'purple')

# Wildcard markers created by the resolution engine as tier rewards.
RAINBOW = 'rainbow'
SPECIAL = 'special'
WILDCARDS = frozenset({RAINBOW, SPECIAL})

# Powerup kinds a generated tile may carry.
POWERUP_EXTRA_MOVES = 'extra_moves'
POWERUP_SCORE_MULTIPLIER = 'score_multiplier'
POWERUP_AREA_BOMB = 'area_bomb'
POWERUPS = (POWERUP_EXTRA_MOVES, POWERUP_SCORE_MULTIPLIER, POWERUP_AREA_BOMB)
POWERUP_CHANCE = 0.12
# Two threshold comparisons on a second draw give a 33/33/34 split.
POWERUP_THRESHOLDS = (0.33, 0.66)

MIN_MATCH = 3
PER_COLOR_MIN_MATCH = {'red': 4, 'blue': 2, 'yellow': 7, 'green': 3, 'purple': 5}

# Scoring
POINTS_PER_TILE = 10
BONUS_TIER_SIZE = 5
SUPER_TIER_SIZE = 10
BONUS_TIER_MULTIPLIER = 2
SUPER_TIER_MULTIPLIER = 4
SCORE_MULTIPLIER_FACTOR = 2
SCORE_MULTIPLIER_TURNS = 3
EXTRA_MOVES_PER_POWERUP = 3
SUPER_TIER_MOVE_BONUS = 1

# Combo meter
COMBO_METER_MAX = 100
COMBO_BASE_GAIN = 10
COMBO_GAIN_PER_EXTRA_TILE = 5
COMBO_MAX_GAIN = 25
COMBO_BREAK_PENALTY = 15
COMBO_BREAKOUT_SCORE = 500
COMBO_BREAKOUT_MOVES = 2

# Procedural levels
PROCEDURAL_BASE_TARGET = 20
PROCEDURAL_TARGET_STEP = 5
PROCEDURAL_MIN_COLORS = 3
PROCEDURAL_MAX_JITTER = 5
PROCEDURAL_MIN_MOVES = 12

# Transient presentation effects (seconds of tick time)
EXPLOSION_DURATION = 0.8
SHAKE_DURATION = 0.3
COMIC_WORDS = ('POP!', 'POW!', 'BOOM!', 'ZAP!', 'BANG!', 'WOW!')
