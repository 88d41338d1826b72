"""Report renderers: CSV and aligned tables."""
