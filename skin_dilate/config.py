"""
Centralized configuration constants for skin dilation and upload.

Ground rules:
- 8-bit channels, alpha-like byte last
- Dilation runs before PNG encode, never after
"""

# A pixel counts as opaque only when its alpha byte is strictly above this.
ALPHA_THRESHOLD = 10

# Round-trips after the first pass: 1 + 2 * DILATE_ROUNDS passes in total.
DILATE_ROUNDS = 5

BPP = 4

# (width, height)
SKIN_SIZE = (256, 128)
SKIN_SIZE_HD = (512, 256)

DEFAULT_DATABASE_URL = "https://ddnet.org/skins/"
UPLOAD_ENDPOINT = "edit/modify_skin.php"
UPLOAD_TIMEOUT_S = 30.0

# Only connection failures are retried; a request that reached the server is never re-sent.
MAX_UPLOAD_RETRIES = 1

GAME_VERSION = "tw-0.6"
SKIN_PART = "full"
MODIFY_ACTION = "add"
