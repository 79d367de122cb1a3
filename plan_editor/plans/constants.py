"""Plan edit constants - single source of truth.

All plan edit limits must import from here. Runtime overrides come from
settings (MAX_PATCHES_PER_PROPOSAL, PROPOSAL_TTL_MINUTES).
"""

DEFAULT_MAX_PATCHES = 7
DEFAULT_PROPOSAL_TTL_MINUTES = 15
