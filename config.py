# config.py
"""
Configuration settings for the branching narrative player.
"""

# ── Basic Application Settings ──────────────────────────────────────────────

FPS = 30

# JSON file listing the question sets (paths inside are relative to it)
SEQUENCE_PATH = "media/sequence.json"

# Probe every referenced clip before the first question plays
VERIFY_SEQUENCE_ON_START = True

# Close the window once the last success outcome has finished
QUIT_ON_COMPLETE = False

# Display settings
FULLSCREEN = True
WINDOWED_SIZE = (1280, 720)

# Status badge (question number, attempt) in the top-right corner
SHOW_OVERLAYS = False

# The clip's own audio track; narration and music come from separate files
VIDEO_AUDIO = False

# ── Subtitles ───────────────────────────────────────────────────────────────

# Constant shift applied to the playback clock before cue lookup (seconds).
# Negative values compensate for audio output latency; tweak ±0.02.
SUBTITLE_OFFSET_SEC = -0.12

# Clear the caption whenever playback is between cues
CLEAR_CAPTIONS_IN_GAPS = True

CAPTION_FONT = "sans"
CAPTION_MAX_WIDTH_PCT = 0.80      # wrap width relative to the window
CAPTION_BOTTOM_MARGIN_PCT = 0.08

# ── Choice panel ───────────────────────────────────────────────────────────

CHOICE_SUCCESS_LABEL = "Correct"
CHOICE_FAILURE_LABEL = "Wrong"

# ── Remote control / diagnostics ───────────────────────────────────────────

WEB_PORT = 8080
DIAG_REFRESH_INTERVAL = 1.0

# ── Logging ────────────────────────────────────────────────────────────────

LOG_LEVEL = "INFO"
LOG_FILE = "runtime.log"
