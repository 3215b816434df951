"""
Services Layer

Pure business logic services that:
- Accept domain inputs (IDs, sessions, payloads)
- Return domain outputs (models, dicts)
- Do NOT depend on HTTP request/response objects
- Raise SpearoError subclasses; routes map them to status codes
"""
