"""
Decodificador de instrucciones CHIP-8

Cada instrucción ocupa 16 bits (2 bytes, Big-Endian) y se descompone en
cuatro nibbles (n0, n1, n2, n3):
- n0: Discriminador principal del opcode
- n1, n2, n3: Operandos (índices de registro o dígitos inmediatos) según la instrucción

Campos derivados que usan los handlers:
- x   = n1              (registro Vx)
- y   = n2              (registro Vy)
- n   = n3              (altura de sprite, 4 bits)
- kk  = n2n3            (inmediato de 8 bits)
- nnn = n1n2n3          (dirección de 12 bits)

El patrón de nibbles se traduce a una etiqueta Opcode; la CPU despacha con una
tabla Opcode -> handler. Los patrones que no están en la tabla se etiquetan
como UNKNOWN.

Fuente: Cowgod's Chip-8 Technical Reference
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class Opcode(Enum):
    """Etiqueta de cada instrucción del juego CHIP-8 (patrón en hexadecimal)."""

    NOP = "0000"
    CLS = "00E0"
    RET = "00EE"
    JP = "1nnn"
    CALL = "2nnn"
    SE_VX_KK = "3xkk"
    SNE_VX_KK = "4xkk"
    SE_VX_VY = "5xy0"
    LD_VX_KK = "6xkk"
    ADD_VX_KK = "7xkk"
    LD_VX_VY = "8xy0"
    OR = "8xy1"
    AND = "8xy2"
    XOR = "8xy3"
    ADD_VX_VY = "8xy4"
    SUB = "8xy5"
    SHR = "8xy6"
    SUBN = "8xy7"
    SHL = "8xyE"
    SNE_VX_VY = "9xy0"
    LD_I = "Annn"
    JP_V0 = "Bnnn"
    RND = "Cxkk"
    DRW = "Dxyn"
    SKP = "Ex9E"
    SKNP = "ExA1"
    LD_VX_DT = "Fx07"
    LD_VX_K = "Fx0A"
    LD_DT_VX = "Fx15"
    LD_ST_VX = "Fx18"
    ADD_I_VX = "Fx1E"
    LD_F_VX = "Fx29"
    LD_B_VX = "Fx33"
    LD_MEM_VX = "Fx55"
    LD_VX_MEM = "Fx65"
    UNKNOWN = "????"


# Sub-tablas indexadas por el último nibble (grupo 8) o por el byte bajo (grupos E y F)
_ALU_OPCODES: dict[int, Opcode] = {
    0x0: Opcode.LD_VX_VY,
    0x1: Opcode.OR,
    0x2: Opcode.AND,
    0x3: Opcode.XOR,
    0x4: Opcode.ADD_VX_VY,
    0x5: Opcode.SUB,
    0x6: Opcode.SHR,
    0x7: Opcode.SUBN,
    0xE: Opcode.SHL,
}

_KEY_OPCODES: dict[int, Opcode] = {
    0x9E: Opcode.SKP,
    0xA1: Opcode.SKNP,
}

_MISC_OPCODES: dict[int, Opcode] = {
    0x07: Opcode.LD_VX_DT,
    0x0A: Opcode.LD_VX_K,
    0x15: Opcode.LD_DT_VX,
    0x18: Opcode.LD_ST_VX,
    0x1E: Opcode.ADD_I_VX,
    0x29: Opcode.LD_F_VX,
    0x33: Opcode.LD_B_VX,
    0x55: Opcode.LD_MEM_VX,
    0x65: Opcode.LD_VX_MEM,
}


class Instruction(NamedTuple):
    """Instrucción decodificada: la palabra original, su etiqueta y los nibbles."""

    word: int
    opcode: Opcode
    n0: int
    n1: int
    n2: int
    n3: int

    @property
    def x(self) -> int:
        return self.n1

    @property
    def y(self) -> int:
        return self.n2

    @property
    def n(self) -> int:
        return self.n3

    @property
    def kk(self) -> int:
        return self.word & 0x00FF

    @property
    def nnn(self) -> int:
        return self.word & 0x0FFF


def split_nibbles(word: int) -> tuple[int, int, int, int]:
    """Descompone una palabra de 16 bits en sus cuatro nibbles (de mayor a menor peso)."""
    word &= 0xFFFF
    return (word >> 12) & 0xF, (word >> 8) & 0xF, (word >> 4) & 0xF, word & 0xF


def classify(n0: int, n1: int, n2: int, n3: int) -> Opcode:
    """
    Traduce un patrón de nibbles a su etiqueta Opcode.

    El emparejamiento es exhaustivo sobre el espacio legal de la CHIP-8;
    cualquier otro patrón devuelve Opcode.UNKNOWN. La instrucción 0000 es un
    NOP explícito (la memoria sin inicializar no debe confundirse con un HALT).
    """
    match (n0, n1, n2, n3):
        case (0x0, 0x0, 0x0, 0x0):
            return Opcode.NOP
        case (0x0, 0x0, 0xE, 0x0):
            return Opcode.CLS
        case (0x0, 0x0, 0xE, 0xE):
            return Opcode.RET
        case (0x1, _, _, _):
            return Opcode.JP
        case (0x2, _, _, _):
            return Opcode.CALL
        case (0x3, _, _, _):
            return Opcode.SE_VX_KK
        case (0x4, _, _, _):
            return Opcode.SNE_VX_KK
        case (0x5, _, _, 0x0):
            return Opcode.SE_VX_VY
        case (0x6, _, _, _):
            return Opcode.LD_VX_KK
        case (0x7, _, _, _):
            return Opcode.ADD_VX_KK
        case (0x8, _, _, low):
            return _ALU_OPCODES.get(low, Opcode.UNKNOWN)
        case (0x9, _, _, 0x0):
            return Opcode.SNE_VX_VY
        case (0xA, _, _, _):
            return Opcode.LD_I
        case (0xB, _, _, _):
            return Opcode.JP_V0
        case (0xC, _, _, _):
            return Opcode.RND
        case (0xD, _, _, _):
            return Opcode.DRW
        case (0xE, _, high, low):
            return _KEY_OPCODES.get((high << 4) | low, Opcode.UNKNOWN)
        case (0xF, _, high, low):
            return _MISC_OPCODES.get((high << 4) | low, Opcode.UNKNOWN)
        case _:
            return Opcode.UNKNOWN


def decode(word: int) -> Instruction:
    """
    Decodifica una palabra de 16 bits.

    Args:
        word: Instrucción (byte alto en los bits 15-8)

    Returns:
        Instruction con la etiqueta y los cuatro nibbles
    """
    n0, n1, n2, n3 = split_nibbles(word)
    return Instruction(word & 0xFFFF, classify(n0, n1, n2, n3), n0, n1, n2, n3)


# Plantillas de desensamblado (sintaxis de Cowgod)
_MNEMONICS: dict[Opcode, str] = {
    Opcode.NOP: "NOP",
    Opcode.CLS: "CLS",
    Opcode.RET: "RET",
    Opcode.JP: "JP 0x{nnn:03X}",
    Opcode.CALL: "CALL 0x{nnn:03X}",
    Opcode.SE_VX_KK: "SE V{x:X}, 0x{kk:02X}",
    Opcode.SNE_VX_KK: "SNE V{x:X}, 0x{kk:02X}",
    Opcode.SE_VX_VY: "SE V{x:X}, V{y:X}",
    Opcode.LD_VX_KK: "LD V{x:X}, 0x{kk:02X}",
    Opcode.ADD_VX_KK: "ADD V{x:X}, 0x{kk:02X}",
    Opcode.LD_VX_VY: "LD V{x:X}, V{y:X}",
    Opcode.OR: "OR V{x:X}, V{y:X}",
    Opcode.AND: "AND V{x:X}, V{y:X}",
    Opcode.XOR: "XOR V{x:X}, V{y:X}",
    Opcode.ADD_VX_VY: "ADD V{x:X}, V{y:X}",
    Opcode.SUB: "SUB V{x:X}, V{y:X}",
    Opcode.SHR: "SHR V{x:X}, V{y:X}",
    Opcode.SUBN: "SUBN V{x:X}, V{y:X}",
    Opcode.SHL: "SHL V{x:X}, V{y:X}",
    Opcode.SNE_VX_VY: "SNE V{x:X}, V{y:X}",
    Opcode.LD_I: "LD I, 0x{nnn:03X}",
    Opcode.JP_V0: "JP V0, 0x{nnn:03X}",
    Opcode.RND: "RND V{x:X}, 0x{kk:02X}",
    Opcode.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Opcode.SKP: "SKP V{x:X}",
    Opcode.SKNP: "SKNP V{x:X}",
    Opcode.LD_VX_DT: "LD V{x:X}, DT",
    Opcode.LD_VX_K: "LD V{x:X}, K",
    Opcode.LD_DT_VX: "LD DT, V{x:X}",
    Opcode.LD_ST_VX: "LD ST, V{x:X}",
    Opcode.ADD_I_VX: "ADD I, V{x:X}",
    Opcode.LD_F_VX: "LD F, V{x:X}",
    Opcode.LD_B_VX: "LD B, V{x:X}",
    Opcode.LD_MEM_VX: "LD [I], V{x:X}",
    Opcode.LD_VX_MEM: "LD V{x:X}, [I]",
    Opcode.UNKNOWN: "DW 0x{word:04X}",
}


def disassemble(instruction: Instruction) -> str:
    """Representación legible de una instrucción decodificada (p.ej. 'LD V3, 0x2A')."""
    return _MNEMONICS[instruction.opcode].format(
        word=instruction.word,
        x=instruction.x,
        y=instruction.y,
        n=instruction.n,
        kk=instruction.kk,
        nnn=instruction.nnn,
    )
