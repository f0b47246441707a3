"""
Token Auth Service
------------------
Stateless authentication-token subsystem: Ed25519-signed tokens carrying
identity and role claims, plus FastAPI dependencies that gate requests on them.
"""
