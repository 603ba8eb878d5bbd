from __future__ import annotations

# Remote history limits
BATCH_SIZE = 100
MAX_MESSAGES_FETCH = 1000
DEFAULT_CONTEXT_MESSAGES = 25

# Anchor search
ANCHOR_RETRIES = 2
ANCHOR_WIDEN_DAYS = 1

# Source-local civil timezone (US Eastern rules by default)
TZ_STANDARD_OFFSET_MINUTES = -300
TZ_OBSERVE_DST = True

# Local index
DEFAULT_INDEX_PATH = "logs"
INDEX_ENABLED = True
BACKFILL_INDEX_ON_FETCH = False

# Discord output
DISCORD_MESSAGE_LIMIT = 2000
DISCORD_MAX_MESSAGE_LEN = 1900
PREVIEW_LENGTH = 250
DEFAULT_AI_CHANNEL = "ai"

DEFAULT_USER_PROMPT = "Summarize the conversation."
DEFAULT_OPENAI_MODEL = "gpt-5.1"
INDEX_MAX_RECORDS = 1_000_000
