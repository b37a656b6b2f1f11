"""Layout components for the Dash app."""
