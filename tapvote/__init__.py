"""
Tap Vote - questionnaire API.

Authenticated users keep questionnaires in a realtime database and can
publish copies for anyone to read. Tokens are verified by an external
identity provider.
"""

__version__ = "0.1.0"
