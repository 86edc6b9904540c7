"""Pure scoring pipeline: normalization, signals, skills and aggregation."""
