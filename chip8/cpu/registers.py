"""
Registros de la CPU CHIP-8

La CHIP-8 tiene:
- 16 registros de propósito general de 8 bits: V0..VF
- Un registro índice I (puntero a memoria para sprites y bloques)
- PC (Program Counter) de 16 bits, que solo direcciona 0x000-0xFFF

VF hace de registro de flags: lo sobrescribe cada operación aritmética, de
desplazamiento o de dibujo que define un flag (carry, borrow, colisión).
Un programa no puede confiar en que VF conserve su valor tras esas operaciones.
"""

from __future__ import annotations

from ..memory.mmu import PROGRAM_START

REGISTER_COUNT = 16
FLAG_REGISTER = 0xF


class Registers:
    """
    Banco de registros de la CHIP-8.

    Vx y PC aplican wrap-around (8 y 16 bits). I NO se enmascara: la aritmética
    del índice (Fx1E, Fx55, Fx65) nunca vuelve a entrar en el rango válido, de
    modo que un I fuera de 0x000-0xFFF lanza MemoryFault en cuanto se usa.
    """

    def __init__(self) -> None:
        """Inicializa V0..VF e I a cero y PC al inicio del programa (0x200)."""
        self.v: list[int] = [0] * REGISTER_COUNT
        self.i: int = 0
        self.pc: int = PROGRAM_START

    # ========== Registros de propósito general ==========

    def get_v(self, index: int) -> int:
        """Obtiene el registro Vx"""
        return self.v[index]

    def set_v(self, index: int, value: int) -> None:
        """Establece el registro Vx (8 bits, wrap-around)"""
        self.v[index] = value & 0xFF

    def get_vf(self) -> int:
        """Obtiene el registro de flags VF"""
        return self.v[FLAG_REGISTER]

    def set_vf(self, value: int | bool) -> None:
        """Establece VF a 0 o 1"""
        self.v[FLAG_REGISTER] = 1 if value else 0

    # ========== Registros de 16 bits ==========

    def get_i(self) -> int:
        """Obtiene el registro índice I"""
        return self.i

    def set_i(self, value: int) -> None:
        """Establece el registro índice I (sin wrap-around)"""
        self.i = value

    def get_pc(self) -> int:
        """Obtiene el Program Counter"""
        return self.pc

    def set_pc(self, value: int) -> None:
        """Establece el Program Counter (16 bits, wrap-around)"""
        self.pc = value & 0xFFFF

    def snapshot(self) -> dict[str, int | tuple[int, ...]]:
        """Copia del estado de los registros (para logs y tests)."""
        return {"v": tuple(self.v), "i": self.i, "pc": self.pc}
