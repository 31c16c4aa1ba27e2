"""auth/ -- Credential store and session tokens for LifeLink.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or drives/.
api/ imports from auth/, not the other way around.
"""
