"""
FastAPI REST API Layer for tts-gateway.

This package defines all HTTP endpoints:
    - routes.py: /api/text-to-speech, /api/ssml, /api/voices,
      /api/legado-import, /health, /metrics
    - schemas.py: Response Pydantic models
    - dependencies.py: Settings, admission gates and connector providers
"""
