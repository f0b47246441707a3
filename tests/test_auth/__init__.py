"""
Auth Module Tests
----------------
Test suite for key management, token issuance/verification and request gating.
"""
