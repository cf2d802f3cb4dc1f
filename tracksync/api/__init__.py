"""Transport between the core and the picker, page and extension contexts."""

from tracksync.api.bridge import UiBridge
from tracksync.api.channel import RequestChannel

__all__ = ["UiBridge", "RequestChannel"]
