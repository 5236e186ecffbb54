"""
ReelCore HTTP API (FastAPI).
"""
