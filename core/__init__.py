"""Core (UI-agnostic) sales dashboard logic.

This package contains:
- CSV ingestion and validation (upload -> pandas -> Transaction records)
- settings and logging setup
- aggregate views (JSON-serializable payloads)
- upload session state / reducer
- chart helpers (Altair -> Vega-Lite spec dict)
"""
