"""Fixed protocol constants for the bonding curve program.

These are part of the replicated state machine: every replica must use the
same values, so they are module constants rather than settings.
"""

# Seed reserves written by Initialize (curve-native units)
SEED_TOKEN_RESERVE = 1_073_000_000
SEED_COLLATERAL_RESERVE = 30

TOTAL_SUPPLY = 1_000_000_000

# token_reserve level at which Migrate unlocks (~80% of total supply)
MIGRATION_THRESHOLD = 800_000_000

# Collateral withheld from the migration payout for the liquidity venue
MIGRATION_FEE = 6

# Appended to every custodial address derivation
DERIVATION_SALT = b"random_seed"

U64_MAX = 2**64 - 1
