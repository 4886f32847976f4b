"""This module handles approval chains: ordered approvers gating a record's status."""
