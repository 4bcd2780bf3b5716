# cws_client/services/__init__.py
"""
Services module initialization
Polling, transport and password services used by the client
"""

from .password_generator import PasswordGenerator, password_generator
from .poll_retry import PollRetryController, PollState, poll

__all__ = [
    'PasswordGenerator',
    'password_generator',
    'PollRetryController',
    'PollState',
    'poll'
]
