"""
sftime Configuration and Constants

This module centralizes all configuration parameters, constants, and default values
for better maintainability and consistency across the codebase.
"""

import os

# ============================================================================
# Column Names
# ============================================================================

DEFAULT_TIME_COLUMN = "time"
DEFAULT_GEOMETRY_COLUMN = "geometry"

# Grouping columns synthesized when converting trajectory collections
TRACK_NAME_COLUMN = "track_name"
TRACKS_NAME_COLUMN = "tracks_name"
TRACK_PREFIX = "Track"
TRACKS_PREFIX = "Tracks"

# Temporary key column used while pivoting geometries into a cube
GEOMETRY_KEY_COLUMN = "_geometry_key"

# ============================================================================
# Coordinate Reference System
# ============================================================================

# Users can override via SFTIME_DEFAULT_CRS environment variable
DEFAULT_CRS = os.environ.get("SFTIME_DEFAULT_CRS", "EPSG:4326")

# ============================================================================
# Joins
# ============================================================================

# Suffixes applied by spatial joins on colliding column names.
# The left-hand suffix decides which column keeps the time designation.
JOIN_SUFFIXES = ("left", "right")

# ============================================================================
# Regular Cube Dimensions
# ============================================================================

CUBE_GEOMETRY_DIM = "geometry"
CUBE_TIME_DIM = "time"
CUBE_CRS_ATTR = "crs"

# ============================================================================
# Time Processing
# ============================================================================

DATETIME_PRECISION = "ns"

# Decomposed date/time parts accepted when composing a time column
TIME_PARTS = ("year", "month", "day", "hour", "minute", "second")

# ============================================================================
# Plotting
# ============================================================================

DEFAULT_TIME_BINS = int(os.environ.get("SFTIME_DEFAULT_TIME_BINS", "6"))
DEFAULT_PANEL_COLUMNS = 3
DEFAULT_PANEL_SIZE = (4.0, 4.0)
PANEL_TITLE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ============================================================================
# Conversion Directions
# ============================================================================

TO_SFTIME = "to_sftime"
FROM_SFTIME = "from_sftime"
CONVERSION_DIRECTIONS = (TO_SFTIME, FROM_SFTIME)
