"""Missing-value normalization, row dropping, imputation and dataset packaging."""
