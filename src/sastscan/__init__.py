"""sastscan: SAST-scan the files you changed, keep the reports tidy."""

__version__ = "0.3.0"
