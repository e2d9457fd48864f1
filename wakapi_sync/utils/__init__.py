"""
Generic utility functions shared across modules.

Includes clock abstractions, local date stamps, hour conversion, top-N
selection and number formatting for CSV cells.
"""
