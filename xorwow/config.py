# xorwow/config.py
# Configuration for the XORWOW engine, its jump tables and the stream service

# Jump tables
# JUMP_MATRICES: number of precomputed matrices per table
# JUMP_LOG2:     each table entry is the previous one raised to 2**JUMP_LOG2
# SEQUENCE_JUMP_LOG2: one subsequence is 2**SEQUENCE_JUMP_LOG2 outputs
JUMP_MATRICES = 32
JUMP_LOG2 = 2
SEQUENCE_JUMP_LOG2 = 67

# What to do with distance bits beyond the last precomputed matrix:
#   'squaring' : exponentiation by squaring (logarithmic, default)
#   'linear'   : apply the last matrix repeatedly (only for code-size constrained ports)
JUMP_STRATEGY = 'squaring'   # 'squaring' | 'linear'

# If set, load the tables from this .npz file (written by `xorwow-tables`)
# instead of generating them on first use.
TABLE_FILE = None

# Stream served by the service
DEFAULT_SEED = 0
SUBSEQUENCE = 0
OFFSET = 0

# Network config
HOST = '127.0.0.1'
PORT = 5000

# Largest count accepted by GET /next
MAX_BATCH = 4096

# Logging level
LOG_LEVEL = 'INFO'
