"""
Pipeline that turns one Wakapi daily summary into three upserted CSV files.

Coordinates fetch, extraction with summaries fallback, ranking, row building
and the per-file upserts.
"""
