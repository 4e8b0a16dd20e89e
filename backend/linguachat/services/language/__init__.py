"""Language detection, translation and per-language lookup tables."""
