"""Core configuration, policy, results and pipeline orchestration."""
