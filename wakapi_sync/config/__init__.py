"""
Configuration loading and validation for the Wakapi connection and CSV output.

Provides strongly typed settings objects for the API endpoint, credentials,
output directory and top-N limits, with upfront validation.
"""
