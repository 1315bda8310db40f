"""
placement_predictor.reporting — ASCII formatting for CLI output.

Modules:
  formatters — Plain-text formatters for predictions, model status,
               training batches and prediction history.
"""
