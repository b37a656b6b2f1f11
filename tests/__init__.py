"""
Test suite for the Road Safety Enforcement Dashboard.

This package contains unit tests and integration tests for:
- Configuration and models (config, core/models.py)
- Loading and schema coercion (loader.py, schema.py, cache.py)
- Aggregation and geography (aggregation.py, geography.py)
- Chart pipeline, figures and the Dash layer
"""
