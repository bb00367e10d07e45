"""spc-labels: collision-free summary labels for SPC charts."""

__version__ = "0.3.0"
