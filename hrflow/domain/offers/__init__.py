"""This module defines offers: their payload, wizard steps and letter templates."""
