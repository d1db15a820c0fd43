"""Resource files and configuration templates."""


def get_default_config() -> str:
    """Return default configuration YAML content."""
    return """# DupSeeker Configuration File

# Input/output files (can be overridden by CLI arguments)
input_file: ~
output_file: ~
metrics_file: ~

# Duplicate marking
duplicates:
  optical_pixel_distance: 100
  # Regex with three capture groups (tile, x, y); ~ uses the ':'-separated parser
  read_name_regex: ~
  detect_optical: true
  max_optical_set_size: 300000
  # SUM_OF_BASE_QUALITIES | TOTAL_MAPPED_REFERENCE_LENGTH | RANDOM
  scoring_strategy: "SUM_OF_BASE_QUALITIES"
  min_base_quality: 15
  fragments_yield_to_pairs: false
  remove_duplicates: false

# Runtime settings
runtime:
  log_level: "WARNING"
  log_file: ~
  enable_progress: true

# Performance settings
performance:
  threads: 1
"""
