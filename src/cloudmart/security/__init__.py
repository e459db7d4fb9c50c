"""
Security Module.

Password hashing, access tokens, role checks and secrets retrieval.
"""
