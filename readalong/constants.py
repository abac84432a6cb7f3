"""All magic numbers and configuration constants."""

SETTLE_DELAY_SECONDS = 0.3          # pause after a single utterance to avoid clipping
SEGMENT_SPLIT_THRESHOLD = 500       # chars; split segments longer than this
TTS_RETRY_COUNT = 3                 # max synthesis attempts per utterance
TTS_RETRY_BASE_DELAY = 1.0          # seconds; base delay for exponential backoff
TTS_RATE = "+0%"                    # speech rate relative to the voice default
DEFAULT_VOICE = "en-US-AriaNeural"
PLAYER_ARGS = ("-nodisp", "-autoexit", "-hide_banner", "-loglevel", "quiet")
CONFIG_FILENAME = "readalong.json"
VERSION = "0.1.0"
