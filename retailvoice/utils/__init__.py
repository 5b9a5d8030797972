"""
Utility modules for RetailVoice.

Cross-cutting concerns:
- Sheets client: HTTP access to the published spreadsheet
- Storage: File output for exported reports
"""
