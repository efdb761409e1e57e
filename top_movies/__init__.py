"""Top Movies: local-first Top 250 list with user ratings."""
