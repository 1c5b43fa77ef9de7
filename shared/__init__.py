"""
Shared kernel

Error taxonomy and the API error envelope used by every app.
"""
