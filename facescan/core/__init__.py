"""
Core utilities shared across the facescan API.

This package hosts:
- configuration helpers (env vars, TTLs, secrets)
- cross-cutting primitives such as logging, the SMTP mailer, password hashing
  and opaque token generation.

Services receive these primitives through their constructors instead of
reaching for globals, so each piece can be swapped in tests.
"""
