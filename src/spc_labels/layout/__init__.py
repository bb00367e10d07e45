"""Label measurement and placement.

Modules:
- placement: place_labels, one or two summary labels without overlap
- metrics: TextMetricsProvider, label heights in panel units
- cache: MeasurementCache, optional memoization of measurements
- labels: label text helpers
- constants: numeric defaults shared with spc_labels.config
"""
