"""
CSV codec, keyed upsert engine, and file I/O for the daily summary CSVs.

Handles serializing and parsing RFC 4180 CSV text, merging new rows into
existing files by composite key, and writing files back safely.
"""
