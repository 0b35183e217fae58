"""
This package models a single OpenID Authentication protocol message:
its parameters, the namespaces of the extensions it carries and its
key-value form and x-www-form-urlencoded encodings. See
C{L{openid_message.message}} for the message itself and
C{L{openid_message.extension}} for writing extensions.
"""

__version__ = '1.0.0'

__all__ = [
    'extension',
    'extensions',
    'kvform',
    'message',
    'oidutil',
    'parameter',
]
