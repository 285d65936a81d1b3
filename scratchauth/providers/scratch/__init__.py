from .auth import ScratchTokenAcquirer
from .client import ScratchClient
from .provider import Scratch

__all__ = ["Scratch", "ScratchClient", "ScratchTokenAcquirer"]
