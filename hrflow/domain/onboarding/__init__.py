"""This module defines onboardings: payload, wizard steps and the task checklist."""
