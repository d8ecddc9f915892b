# Application settings
import os

# --- Filter Parameters ---
FILTER_DEFAULTS = {
    # Edge length of the LUT cube (8, 16 or 64 are typical)
    "lut_dimension": 8,
    # "linear" (one pixel per grid point, row-major) or "tiled" (square grid of N x N tiles)
    "lut_layout": "linear",
    # 0.0 = original image, 1.0 = full LUT
    "intensity": 1.0,
}

# --- Grain Overlay ---
GRAIN_DEFAULTS = {
    "opacity": 0.8,
    "blend_mode": "screen", # multiply, screen, overlay
    "fit": "stretch", # stretch or fill
    "interpolation": "linear", # linear or nearest
}

# --- Processing ---
PROCESSING_DEFAULTS = {
    "prefer_gpu": True,
    "max_workers": min(4, os.cpu_count() or 1),
    # Rows handed to each CPU worker; bounds the size of the temporary arrays
    "rows_per_chunk": 256,
}

# --- Logging ---
LOGGING_LEVEL = "INFO" # Options: DEBUG, INFO, WARNING, ERROR
