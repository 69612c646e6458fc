"""Infrastructure layer — key material on disk.

This layer depends on stdlib and third-party crypto libs (cryptography,
python-jose). It must never import from services, commands, or output.
"""
