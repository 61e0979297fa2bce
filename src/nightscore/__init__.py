"""NightScore: turn sleep-stage intervals into nightly scores and weekly summaries."""

__version__ = "0.1.0"
