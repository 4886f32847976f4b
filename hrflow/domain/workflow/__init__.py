"""This module holds the stepwise workflow engine: drafts, steps and record lifecycle."""
