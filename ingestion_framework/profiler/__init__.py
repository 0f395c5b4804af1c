"""Structural resolution, cell classification and column profiling."""
