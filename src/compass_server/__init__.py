"""compass_server — FastAPI REST API for the Cosmic Compass quiz.

Drives in-memory quiz sessions step by step for a browser UI, persists
leads through the configured sink, and exposes reference data for the
reveal screen.
"""
