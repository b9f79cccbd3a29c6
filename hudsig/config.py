from dataclasses import dataclass

@dataclass
class ColorRules:
    green_min: int = 120
    green_margin: int = 20
    white_min: int = 140
    white_spread: int = 60

@dataclass
class SupplyConfig:
    separator_fallback: float = 0.6   # fraction of strip width
    search_radius: int = 2            # dx, dy in [-r, r]
    glyph_gap: int = 1
    glyphs_per_side: int = 2
    min_active_pixels: int = 8
    min_digit_conf: float = 0.7
    inactive_conf: float = 0.2
    bin_k: float = 0.5
    bin_lo: int = 80
    bin_hi: int = 180

@dataclass
class RunConfig:
    fps: float = 2.0
    start_sec: float = 0.0
    end_sec: float = 420.0
    diff_threshold: float = 0.08
    queue_min_conf: float = 0.6
    workers: int = 1
    templates_dir: str = "assets/templates"
