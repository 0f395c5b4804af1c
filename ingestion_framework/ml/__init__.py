"""Numeric preprocessing of finalized datasets for model training."""
