"""
Utility Modules for tts-gateway.

    - numbers.py: Number rendering for messages and markup
    - timeit.py: Performance measurement utilities
"""
