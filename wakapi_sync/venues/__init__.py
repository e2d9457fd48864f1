"""
Wakapi HTTP client and adapters for its WakaTime-compatible response shapes.

Fetches the statusbar and summaries endpoints and normalizes both responses
into a single DailyUsage record.
"""
