"""Path and admission safety checks."""
