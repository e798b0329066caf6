"""
CPU (Central Processing Unit) - Intérprete CHIP-8

La CPU ejecuta instrucciones en un ciclo continuo:
1. Fetch: Lee los dos bytes apuntados por PC (Big-Endian)
2. Increment: Avanza PC en 2 ANTES de aplicar los efectos de la instrucción
3. Decode: Descompone la palabra en cuatro nibbles y obtiene la etiqueta Opcode
4. Execute: Despacha la etiqueta a su handler mediante la tabla de despacho

El orden del paso 2 es un invariante: los saltos escriben un destino absoluto,
las llamadas apilan el PC ya avanzado y los saltos condicionales (skip) suman
2 más sobre ese PC avanzado.

Estado que maneja la CPU:
- Registers (V0..VF, I, PC) y CallStack: propiedad de la CPU
- Memory, Display, Timer y Keypad: referencias a los componentes de la máquina

Fuente: Cowgod's Chip-8 Technical Reference
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

import numpy as np

from ..errors import UnknownOpcode
from ..memory.font import GLYPH_HEIGHT
from ..memory.mmu import FONT_START
from .decoder import Instruction, Opcode, decode, disassemble
from .registers import Registers
from .stack import DEFAULT_STACK_CAPACITY, CallStack

if TYPE_CHECKING:
    from ..gpu.display import Display
    from ..io.keypad import Keypad
    from ..io.timer import Timer
    from ..memory.mmu import Memory

logger = logging.getLogger(__name__)

INSTRUCTION_SIZE = 2


class CPU:
    """
    CPU de la CHIP-8.

    Gestiona el ciclo de instrucción (Fetch-Decode-Execute) y ejecuta opcodes.
    Mantiene una instancia de Registers, la pila de llamadas y referencias al
    resto de componentes de la máquina.
    """

    def __init__(
        self,
        memory: Memory,
        display: Display,
        timer: Timer,
        keypad: Keypad,
        stack_capacity: int | None = DEFAULT_STACK_CAPACITY,
        shift_uses_vy: bool = True,
        strict: bool = False,
        seed: int | None = None,
    ) -> None:
        """
        Inicializa la CPU con referencias a los componentes de la máquina.

        Args:
            memory: Memoria de 4 KB
            display: Framebuffer 64x32
            timer: Timers DT/ST
            keypad: Teclado de 16 teclas (solo lectura)
            stack_capacity: Profundidad máxima de la pila (None = sin límite)
            shift_uses_vy: Semántica legacy de 8xy6/8xyE (desplaza Vy). Si es
                False se desplaza Vx (dialecto CHIP-48/SUPER-CHIP)
            strict: Si es True, un opcode desconocido lanza UnknownOpcode en
                lugar de registrarse y tratarse como NOP
            seed: Semilla del generador aleatorio de Cxkk (reproducibilidad)
        """
        self.registers = Registers()
        self.stack = CallStack(stack_capacity)
        self.memory = memory
        self.display = display
        self.timer = timer
        self.keypad = keypad

        self.shift_uses_vy = shift_uses_vy
        self.strict = strict
        self._rng = np.random.default_rng(seed)

        # Snapshot del teclado tomado al inicio del ciclo actual
        self._keys: tuple[bool, ...] = keypad.snapshot()

        # Espera de tecla (Fx0A): registro destino, estado previo del teclado
        # y la instrucción que quedó suspendida
        self._key_wait_register: int | None = None
        self._key_wait_previous: tuple[bool, ...] = self._keys
        self._key_wait_instruction: Instruction | None = None

        # Contadores para diagnóstico
        self.instruction_count: int = 0
        self.unknown_opcode_count: int = 0

        # Tabla de despacho (Dispatch Table): etiqueta Opcode -> handler
        self._opcode_table: dict[Opcode, Callable[[Instruction], None]] = {
            Opcode.NOP: self._op_nop,
            Opcode.CLS: self._op_cls,
            Opcode.RET: self._op_ret,
            # Saltos y llamadas
            Opcode.JP: self._op_jp,
            Opcode.CALL: self._op_call,
            Opcode.JP_V0: self._op_jp_v0,
            # Saltos condicionales (skip)
            Opcode.SE_VX_KK: self._op_se_vx_kk,
            Opcode.SNE_VX_KK: self._op_sne_vx_kk,
            Opcode.SE_VX_VY: self._op_se_vx_vy,
            Opcode.SNE_VX_VY: self._op_sne_vx_vy,
            # Cargas inmediatas
            Opcode.LD_VX_KK: self._op_ld_vx_kk,
            Opcode.ADD_VX_KK: self._op_add_vx_kk,
            # Bloque ALU (8xyN)
            Opcode.LD_VX_VY: self._op_ld_vx_vy,
            Opcode.OR: self._op_or,
            Opcode.AND: self._op_and,
            Opcode.XOR: self._op_xor,
            Opcode.ADD_VX_VY: self._op_add_vx_vy,
            Opcode.SUB: self._op_sub,
            Opcode.SHR: self._op_shr,
            Opcode.SUBN: self._op_subn,
            Opcode.SHL: self._op_shl,
            # Registro índice, aleatorio y dibujo
            Opcode.LD_I: self._op_ld_i,
            Opcode.RND: self._op_rnd,
            Opcode.DRW: self._op_drw,
            # Teclado
            Opcode.SKP: self._op_skp,
            Opcode.SKNP: self._op_sknp,
            Opcode.LD_VX_K: self._op_ld_vx_k,
            # Timers
            Opcode.LD_VX_DT: self._op_ld_vx_dt,
            Opcode.LD_DT_VX: self._op_ld_dt_vx,
            Opcode.LD_ST_VX: self._op_ld_st_vx,
            # Memoria
            Opcode.ADD_I_VX: self._op_add_i_vx,
            Opcode.LD_F_VX: self._op_ld_f_vx,
            Opcode.LD_B_VX: self._op_ld_b_vx,
            Opcode.LD_MEM_VX: self._op_ld_mem_vx,
            Opcode.LD_VX_MEM: self._op_ld_vx_mem,
            Opcode.UNKNOWN: self._op_unknown,
        }

        logger.info("CPU inicializada")

    # ========== Ciclo de instrucción ==========

    def fetch(self) -> int:
        """
        Lee la instrucción en PC y avanza PC en 2.

        Si PC+1 excede 0xFFF, Memory lanza MemoryFault y PC no se modifica.

        Returns:
            Palabra de 16 bits (Big-Endian)
        """
        pc = self.registers.get_pc()
        word = self.memory.read_word(pc)
        self.registers.set_pc(pc + INSTRUCTION_SIZE)
        return word

    def step(self) -> Instruction | None:
        """
        Ejecuta un ciclo completo Fetch-Decode-Execute.

        Mientras la CPU está suspendida en Fx0A, cada llamada solo comprueba el
        teclado: no se hace fetch y PC sigue apuntando a la instrucción Fx0A.

        Returns:
            La instrucción ejecutada (o la Fx0A que se acaba de completar), o
            None si la CPU sigue esperando una tecla

        Raises:
            MemoryFault: Si el fetch o un acceso de la instrucción sale de rango
            StackUnderflow / StackOverflow: En 00EE / 2nnn con la pila vacía / llena
            UnknownOpcode: Solo en modo estricto
        """
        self._keys = self.keypad.sample()

        if self._key_wait_register is not None:
            return self._poll_key_wait()

        pc = self.registers.get_pc()
        instruction = decode(self.fetch())

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"0x{pc:03X}: {instruction.word:04X}  {disassemble(instruction)}")

        self._opcode_table[instruction.opcode](instruction)
        self.instruction_count += 1
        return instruction

    @property
    def waiting_for_key(self) -> bool:
        """True mientras la CPU está suspendida en Fx0A."""
        return self._key_wait_register is not None

    def _skip(self) -> None:
        """Salta la siguiente instrucción (PC ya avanzado + 2)."""
        self.registers.set_pc(self.registers.get_pc() + INSTRUCTION_SIZE)

    # ========== Control ==========

    def _op_nop(self, instruction: Instruction) -> None:
        """
        0000 - NOP

        La memoria sin inicializar (ceros) tras el final del programa no debe
        detener la ejecución, así que 0000 no hace nada.
        """

    def _op_cls(self, instruction: Instruction) -> None:
        """00E0 - CLS: Apaga todos los píxeles."""
        self.display.clear()

    def _op_ret(self, instruction: Instruction) -> None:
        """
        00EE - RET: Desapila la dirección de retorno en PC.

        Con la pila vacía lanza StackUnderflow; PC queda en el valor ya
        avanzado por el fetch.
        """
        self.registers.set_pc(self.stack.pop())

    def _op_jp(self, instruction: Instruction) -> None:
        """1nnn - JP addr: PC = nnn."""
        self.registers.set_pc(instruction.nnn)

    def _op_call(self, instruction: Instruction) -> None:
        """2nnn - CALL addr: Apila el PC avanzado y salta a nnn."""
        self.stack.push(self.registers.get_pc())
        self.registers.set_pc(instruction.nnn)

    def _op_jp_v0(self, instruction: Instruction) -> None:
        """
        Bnnn - JP V0, addr: PC = nnn + V0.

        El resultado puede superar 0xFFF; el siguiente fetch lanzará MemoryFault.
        """
        self.registers.set_pc(instruction.nnn + self.registers.get_v(0))

    # ========== Saltos condicionales ==========

    def _op_se_vx_kk(self, instruction: Instruction) -> None:
        """3xkk - SE Vx, byte"""
        if self.registers.get_v(instruction.x) == instruction.kk:
            self._skip()

    def _op_sne_vx_kk(self, instruction: Instruction) -> None:
        """4xkk - SNE Vx, byte"""
        if self.registers.get_v(instruction.x) != instruction.kk:
            self._skip()

    def _op_se_vx_vy(self, instruction: Instruction) -> None:
        """5xy0 - SE Vx, Vy"""
        if self.registers.get_v(instruction.x) == self.registers.get_v(instruction.y):
            self._skip()

    def _op_sne_vx_vy(self, instruction: Instruction) -> None:
        """9xy0 - SNE Vx, Vy"""
        if self.registers.get_v(instruction.x) != self.registers.get_v(instruction.y):
            self._skip()

    # ========== Cargas y ALU ==========

    def _op_ld_vx_kk(self, instruction: Instruction) -> None:
        """6xkk - LD Vx, byte"""
        self.registers.set_v(instruction.x, instruction.kk)

    def _op_add_vx_kk(self, instruction: Instruction) -> None:
        """7xkk - ADD Vx, byte (wrap-around de 8 bits, VF no cambia)"""
        self.registers.set_v(instruction.x, self.registers.get_v(instruction.x) + instruction.kk)

    def _op_ld_vx_vy(self, instruction: Instruction) -> None:
        """8xy0 - LD Vx, Vy"""
        self.registers.set_v(instruction.x, self.registers.get_v(instruction.y))

    def _op_or(self, instruction: Instruction) -> None:
        """8xy1 - OR Vx, Vy"""
        regs = self.registers
        regs.set_v(instruction.x, regs.get_v(instruction.x) | regs.get_v(instruction.y))

    def _op_and(self, instruction: Instruction) -> None:
        """8xy2 - AND Vx, Vy"""
        regs = self.registers
        regs.set_v(instruction.x, regs.get_v(instruction.x) & regs.get_v(instruction.y))

    def _op_xor(self, instruction: Instruction) -> None:
        """8xy3 - XOR Vx, Vy"""
        regs = self.registers
        regs.set_v(instruction.x, regs.get_v(instruction.x) ^ regs.get_v(instruction.y))

    # Los flags se escriben DESPUÉS del resultado: si x == F, VF termina con el flag.

    def _op_add_vx_vy(self, instruction: Instruction) -> None:
        """8xy4 - ADD Vx, Vy: VF = 1 si la suma supera 255 (carry)."""
        regs = self.registers
        total = regs.get_v(instruction.x) + regs.get_v(instruction.y)
        regs.set_v(instruction.x, total)
        regs.set_vf(total > 0xFF)

    def _op_sub(self, instruction: Instruction) -> None:
        """
        8xy5 - SUB Vx, Vy: Vx = Vx - Vy.

        VF = 1 si Vx > Vy, comparando los valores ANTES de la operación
        (NOT borrow). Con Vx == Vy el resultado es 0 y VF = 0.
        """
        regs = self.registers
        vx = regs.get_v(instruction.x)
        vy = regs.get_v(instruction.y)
        regs.set_v(instruction.x, vx - vy)
        regs.set_vf(vx > vy)

    def _op_subn(self, instruction: Instruction) -> None:
        """8xy7 - SUBN Vx, Vy: Vx = Vy - Vx, VF = 1 si Vy > Vx (valores previos)."""
        regs = self.registers
        vx = regs.get_v(instruction.x)
        vy = regs.get_v(instruction.y)
        regs.set_v(instruction.x, vy - vx)
        regs.set_vf(vy > vx)

    def _shift_source(self, instruction: Instruction) -> int:
        reg = instruction.y if self.shift_uses_vy else instruction.x
        return self.registers.get_v(reg)

    def _op_shr(self, instruction: Instruction) -> None:
        """8xy6 - SHR: VF = bit 0 del origen, Vx = origen >> 1 (origen = Vy en legacy)."""
        source = self._shift_source(instruction)
        self.registers.set_v(instruction.x, source >> 1)
        self.registers.set_vf(source & 0x01)

    def _op_shl(self, instruction: Instruction) -> None:
        """8xyE - SHL: VF = bit 7 del origen, Vx = origen << 1 (origen = Vy en legacy)."""
        source = self._shift_source(instruction)
        self.registers.set_v(instruction.x, source << 1)
        self.registers.set_vf(source & 0x80)

    # ========== Índice, aleatorio y dibujo ==========

    def _op_ld_i(self, instruction: Instruction) -> None:
        """Annn - LD I, addr"""
        self.registers.set_i(instruction.nnn)

    def _op_rnd(self, instruction: Instruction) -> None:
        """Cxkk - RND Vx, byte: Vx = aleatorio(0-255) AND kk"""
        value = int(self._rng.integers(0, 256))
        self.registers.set_v(instruction.x, value & instruction.kk)

    def _op_drw(self, instruction: Instruction) -> None:
        """
        Dxyn - DRW Vx, Vy, n

        Lee n bytes desde memory[I] y los compone en (Vx, Vy). VF se fija a 0 o 1
        en CADA llamada según si esta llamada produjo alguna colisión.
        """
        regs = self.registers
        sprite = self.memory.read_block(regs.get_i(), instruction.n)
        collision = self.display.draw(regs.get_v(instruction.x), regs.get_v(instruction.y), sprite)
        regs.set_vf(collision)

    # ========== Teclado ==========

    def _op_skp(self, instruction: Instruction) -> None:
        """Ex9E - SKP Vx: Salta si la tecla Vx está pulsada."""
        if self._keys[self.registers.get_v(instruction.x) & 0xF]:
            self._skip()

    def _op_sknp(self, instruction: Instruction) -> None:
        """ExA1 - SKNP Vx: Salta si la tecla Vx NO está pulsada."""
        if not self._keys[self.registers.get_v(instruction.x) & 0xF]:
            self._skip()

    def _op_ld_vx_k(self, instruction: Instruction) -> None:
        """
        Fx0A - LD Vx, K: Espera una pulsación y guarda la tecla en Vx.

        Suspensión cooperativa: PC vuelve a apuntar a esta instrucción y la CPU
        entra en estado de espera. step() no hace fetch mientras espera, pero
        sigue devolviendo el control al bucle principal en cada ciclo, de modo
        que los timers avanzan y se puede cancelar la ejecución.
        Solo cuenta una transición soltada -> pulsada ocurrida después de la espera.
        """
        self.registers.set_pc(self.registers.get_pc() - INSTRUCTION_SIZE)
        self._key_wait_register = instruction.x
        self._key_wait_previous = self._keys
        self._key_wait_instruction = instruction
        logger.debug(f"Fx0A: esperando tecla para V{instruction.x:X}")

    def _poll_key_wait(self) -> Instruction | None:
        previous = self._key_wait_previous
        self._key_wait_previous = self._keys
        for key, pressed in enumerate(self._keys):
            if pressed and not previous[key]:
                self.registers.set_v(self._key_wait_register, key)
                self.registers.set_pc(self.registers.get_pc() + INSTRUCTION_SIZE)
                logger.debug(f"Fx0A: tecla 0x{key:X} -> V{self._key_wait_register:X}")
                instruction = self._key_wait_instruction
                self._key_wait_register = None
                self._key_wait_instruction = None
                self.instruction_count += 1
                return instruction
        return None

    # ========== Timers ==========

    def _op_ld_vx_dt(self, instruction: Instruction) -> None:
        """Fx07 - LD Vx, DT"""
        self.registers.set_v(instruction.x, self.timer.read_delay())

    def _op_ld_dt_vx(self, instruction: Instruction) -> None:
        """Fx15 - LD DT, Vx"""
        self.timer.write_delay(self.registers.get_v(instruction.x))

    def _op_ld_st_vx(self, instruction: Instruction) -> None:
        """Fx18 - LD ST, Vx"""
        self.timer.write_sound(self.registers.get_v(instruction.x))

    # ========== Memoria ==========

    def _op_add_i_vx(self, instruction: Instruction) -> None:
        """Fx1E - ADD I, Vx (VF no cambia)"""
        regs = self.registers
        regs.set_i(regs.get_i() + regs.get_v(instruction.x))

    def _op_ld_f_vx(self, instruction: Instruction) -> None:
        """
        Fx29 - LD F, Vx: I = dirección del glifo del dígito hexadecimal en Vx.

        Solo se usa el nibble bajo de Vx (Vx & 0xF): con Vx > 15, I apunta al
        glifo de ese nibble y nunca más allá de la tabla de fuente.
        """
        digit = self.registers.get_v(instruction.x) & 0xF
        self.registers.set_i(FONT_START + digit * GLYPH_HEIGHT)

    def _op_ld_b_vx(self, instruction: Instruction) -> None:
        """
        Fx33 - LD B, Vx: Guarda los 3 dígitos decimales de Vx en I, I+1, I+2.

        Ejemplo: Vx = 255 -> [2, 5, 5]; Vx = 9 -> [0, 0, 9]
        """
        value = self.registers.get_v(instruction.x)
        self.memory.write_block(self.registers.get_i(), [value // 100, (value // 10) % 10, value % 10])

    def _op_ld_mem_vx(self, instruction: Instruction) -> None:
        """Fx55 - LD [I], Vx: Guarda V0..Vx en memoria desde I; después I += x + 1."""
        regs = self.registers
        count = instruction.x + 1
        self.memory.write_block(regs.get_i(), regs.v[:count])
        regs.set_i(regs.get_i() + count)

    def _op_ld_vx_mem(self, instruction: Instruction) -> None:
        """Fx65 - LD Vx, [I]: Carga V0..Vx desde memoria en I; después I += x + 1."""
        regs = self.registers
        count = instruction.x + 1
        data = self.memory.read_block(regs.get_i(), count)
        for index, value in enumerate(data):
            regs.set_v(index, value)
        regs.set_i(regs.get_i() + count)

    # ========== Opcodes desconocidos ==========

    def _op_unknown(self, instruction: Instruction) -> None:
        """
        Patrón fuera de la tabla: se registra y se trata como NOP.

        Un programa malformado no debe tumbar el proceso host. En modo estricto
        se lanza UnknownOpcode.
        """
        addr = (self.registers.get_pc() - INSTRUCTION_SIZE) & 0xFFFF
        self.unknown_opcode_count += 1
        if self.strict:
            raise UnknownOpcode(instruction.word, addr)
        logger.warning(f"Opcode desconocido 0x{instruction.word:04X} en 0x{addr:03X}, ignorando")
