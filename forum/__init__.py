"""forum/ -- Questions, answers, and profile lookups behind the authorization guard.

Layer rule: forum/ may import from auth/ and core/. It does NOT import from api/.
"""
