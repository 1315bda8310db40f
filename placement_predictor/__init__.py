"""Placement Predictor — logistic placement scoring with periodic retraining."""

__version__ = "0.1.0"
