"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Exceptions, constrained types, messages and the event bus
- music/: Media, queue entries, the request store and playlist formatting
- voting/: Skip/like tallies and the skip threshold policy
"""

from opendj.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
