"""Haiku generation backends."""
