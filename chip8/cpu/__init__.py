"""
Módulo CPU - Intérprete del juego de instrucciones CHIP-8
"""

from .core import CPU
from .decoder import Instruction, Opcode, decode, disassemble
from .registers import Registers
from .stack import CallStack

__all__ = ["CPU", "CallStack", "Instruction", "Opcode", "Registers", "decode", "disassemble"]
