"""auth/ -- Authentication and authorization package for the forum backend.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or forum/.
api/ and forum/ import from auth/, not the other way around.
"""
