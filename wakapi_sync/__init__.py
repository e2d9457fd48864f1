"""
wakapi_sync – daily Wakapi/WakaTime summaries persisted as idempotent CSV files.
"""
