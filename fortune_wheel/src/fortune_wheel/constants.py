MIN_SLICES = 2
MAX_SLICES = 16
MAX_LABEL_LENGTH = 60
MAX_TITLE_LENGTH = 60

# Reveal delay after a spin starts; identical for every wheel.
SPIN_DURATION_MS = 4500

MIN_EXTRA_SPINS = 5
MAX_EXTRA_SPINS = 8
SAFETY_MARGIN_FRACTION = 0.25
SAFETY_MARGIN_CAP_DEG = 8.0

# 16 bytes -> 128 bits -> 32 hex chars
EDIT_KEY_BYTES = 16

# Per-slice validation errors
SLICE_EMPTY = "empty"
SLICE_TOO_LONG = "tooLong"
# Slice-count errors
TOO_FEW_SLICES = "tooFew"
TOO_MANY_SLICES = "tooMany"
# Wheel-level id error
DUPLICATE_SLICE_ID = "duplicateId"

# Stable error codes
VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
EDIT_KEY_MISSING = "EDIT_KEY_MISSING"
INVALID_EDIT_KEY = "INVALID_EDIT_KEY"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
