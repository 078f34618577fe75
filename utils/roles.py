PLAYER = "PLAYER"
GROUND_OWNER = "GROUND_OWNER"
ADMIN = "ADMIN"

DEFAULT_ROLES = [PLAYER, GROUND_OWNER, ADMIN]
ADMIN_ROLES = frozenset({ADMIN})
