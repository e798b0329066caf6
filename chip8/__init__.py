"""
Chip8 VM - Máquina virtual para programas CHIP-8
"""

from .errors import Chip8Error, MemoryFault, StackOverflow, StackUnderflow, UnknownOpcode
from .machine import Chip8

__version__ = "0.1.0"

__all__ = ["Chip8", "Chip8Error", "MemoryFault", "StackOverflow", "StackUnderflow", "UnknownOpcode"]
