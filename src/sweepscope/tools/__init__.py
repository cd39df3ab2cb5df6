"""Developer tooling (debug timing hooks)."""
