"""
FSRS algorithm constants.

This module contains the static FSRS (Free Spaced Repetition Scheduler) parameters
used as the global default by vocabfsrs. No runtime configuration, pure constants only.
"""
from typing import Tuple

# Default FSRS parameters (weights 'w').
# Parameter sets stored by the vocabulary app are positional, so indices must
# never be reordered. Roles per index:
#
#   w[0..3]   initial stability for Again / Hard / Good / Easy
#   w[4]      initial difficulty for Good
#   w[5]      initial difficulty exponent
#   w[6]      difficulty delta per rating step
#   w[7]      difficulty mean reversion weight
#   w[8]      recall stability growth (exp scale)
#   w[9]      recall stability saturation exponent
#   w[10]     recall stability retrievability coefficient
#   w[11]     forget stability scale
#   w[12]     forget stability difficulty exponent
#   w[13]     forget stability stability exponent
#   w[14]     forget stability retrievability coefficient
#   w[15]     hard penalty
#   w[16]     easy bonus
#   w[17]     short-term stability scale
#   w[18]     short-term stability offset
#   w[19]     short-term stability saturation exponent
#   w[20]     forgetting curve decay
DEFAULT_PARAMETERS: Tuple[float, ...] = (
    0.212,   # w[0]
    1.2931,  # w[1]
    2.3065,  # w[2]
    8.2956,  # w[3]
    6.4133,  # w[4]
    0.8334,  # w[5]
    3.0194,  # w[6]
    0.001,   # w[7]
    1.8722,  # w[8]
    0.1666,  # w[9]
    0.796,   # w[10]
    1.4835,  # w[11]
    0.0614,  # w[12]
    0.2629,  # w[13]
    1.6483,  # w[14]
    0.6014,  # w[15]
    1.8729,  # w[16]
    0.5425,  # w[17]
    0.0912,  # w[18]
    0.0658,  # w[19]
    0.1542,  # w[20]
)

PARAMETER_COUNT: int = 21

# Named indices into the weight vector.
W_INIT_DIFFICULTY = 4
W_INIT_DIFFICULTY_EXP = 5
W_DIFFICULTY_DELTA = 6
W_MEAN_REVERSION = 7
W_RECALL_GROWTH = 8
W_RECALL_SATURATION = 9
W_RECALL_RETRIEVABILITY = 10
W_FORGET_SCALE = 11
W_FORGET_DIFFICULTY = 12
W_FORGET_STABILITY = 13
W_FORGET_RETRIEVABILITY = 14
W_HARD_PENALTY = 15
W_EASY_BONUS = 16
W_SHORT_TERM_SCALE = 17
W_SHORT_TERM_OFFSET = 18
W_SHORT_TERM_SATURATION = 19
W_DECAY = 20

# Default desired retention at the scheduled due date.
DEFAULT_REQUEST_RETENTION: float = 0.9

# Upper bound (days) on any scheduled interval.
DEFAULT_MAXIMUM_INTERVAL: int = 36500

DEFAULT_ENABLE_FUZZ: bool = True

MIN_STABILITY: float = 0.1
MIN_DIFFICULTY: float = 1.0
MAX_DIFFICULTY: float = 10.0

# Intervals below this are never fuzzed.
FUZZ_MIN_INTERVAL: float = 2.5

# Upper bound (inclusive) of a difficulty band and its display label.
DIFFICULTY_BANDS: Tuple[Tuple[float, str], ...] = (
    (3.0, "easy"),
    (5.0, "normal"),
    (7.0, "hard"),
)
DIFFICULTY_LABEL_MAX: str = "very hard"

# Seeds handed out by init_card fall in [0, SEED_RANGE).
SEED_RANGE: int = 10000
