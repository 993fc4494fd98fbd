"""Customer quotes: configuration answers and estimate calculation."""
