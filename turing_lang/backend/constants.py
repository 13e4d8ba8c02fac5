"""Engine and driver constants.

- Tape margin kept around the head
- Loop-detection defaults used by the command line driver
- Exit codes of the command line driver
"""

# ============================================================================
# Tape
# ============================================================================
# The head always has at least TAPE_MARGIN cells strictly on each side of it.

TAPE_MARGIN = 3


# ============================================================================
# Loop detection
# ============================================================================
# A run is aborted once any state was entered more than the threshold times
# within one batch of steps. Frequencies are reset between batches.

DEFAULT_LOOP_THRESHOLD = 1000
DEFAULT_BATCH_SIZE = 5000


# ============================================================================
# Driver exit codes
# ============================================================================

EXIT_OK = 0
EXIT_WARNINGS = 1
EXIT_ERRORS = 2
EXIT_ABORTED = 3
