"""
Pocket Ledger - App Configuration
"""

import logging

# Host window
SCREEN_W = 1280
SCREEN_H = 800
FPS      = 60
TITLE    = "Pocket Ledger"

# Logging
LOG_LEVEL = logging.INFO

# Calculator window geometry (pixels)
CALC_DEFAULT_W = 320
CALC_DEFAULT_H = 500
CALC_MIN_W     = 280
CALC_MAX_W     = 560
CALC_MIN_H     = 440
CALC_MAX_H     = 900
RESIZE_HANDLE  = 20     # bottom-right square handle

# Calculator display
DISPLAY_MAX_CHARS = 12

# Display font tiers: (min length exclusive, point size), checked in order
DISPLAY_FONT_TIERS = [(9, 30), (6, 36), (0, 48)]
BUTTON_FONT_SMALL_BELOW_W = 340

# Host behaviour: a primary press outside the calculator closes it
CLOSE_ON_OUTSIDE_CLICK = False
