"""Process-wide chart pipelines used by the Dash callbacks."""
