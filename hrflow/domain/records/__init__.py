"""This module stores committed records and projects them for list views."""
