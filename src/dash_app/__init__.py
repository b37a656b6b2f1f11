"""Dash web front end for the enforcement dashboard."""
