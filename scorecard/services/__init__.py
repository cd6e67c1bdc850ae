"""Scoring engine, scorecard store, roster sync and admin auth services."""
