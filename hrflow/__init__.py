"""Stepwise workflow engine for HR offers and onboarding."""
