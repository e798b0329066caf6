"""
Chip8 - Sistema Principal (Placa Base)

La clase Chip8 representa la "placa base" de la máquina virtual, integrando todos
los componentes:
- CPU (registros, pila de llamadas, tabla de despacho)
- Memory (4 KB con la fuente en 0x050 y el programa en 0x200)
- Display (framebuffer 64x32)
- Timer (DT/ST a 60 Hz)
- Keypad (16 teclas, escritas por la fuente de entrada externa)

Todo el estado se crea una sola vez al construir la máquina y vive durante una
ejecución. No hay singletons globales: cada instancia de Chip8 es dueña de su estado.

Concepto de bucle principal:
- Un único hilo ejecuta el ciclo Fetch-Decode-Execute
- Los timers avanzan con el tiempo real (60 Hz), no con el número de instrucciones
- El framebuffer se entrega al renderer a su propia cadencia (frame rate)
- La cancelación (cerrar ventana, Ctrl+C, stop()) solo se comprueba entre
  instrucciones: el estado siempre queda alineado a instrucción
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .cpu.core import CPU
from .cpu.decoder import Instruction, decode, disassemble
from .cpu.registers import Registers
from .cpu.stack import DEFAULT_STACK_CAPACITY
from .errors import Chip8Error
from .gpu.display import Display
from .io.keypad import Keypad
from .io.timer import Timer
from .memory.font import FONT_SET
from .memory.mmu import Memory
from .memory.rom import Rom
from .system_clock import DEFAULT_FRAME_RATE, DEFAULT_INSTRUCTIONS_PER_SECOND, SystemClock

if TYPE_CHECKING:
    from .gpu.renderer import Renderer
    from .io.audio import Beeper

logger = logging.getLogger(__name__)


class Chip8:
    """
    Máquina virtual CHIP-8 completa.

    Proporciona tick() (un ciclo) y run() (bucle principal con las tres cadencias).
    Los colaboradores externos (renderer y audio) se conectan con
    attach_renderer() y attach_beeper().
    """

    # Frames entre mensajes de heartbeat (nivel INFO)
    HEARTBEAT_FRAMES = 60

    def __init__(
        self,
        rom_path: str | Path | None = None,
        *,
        font: bytes | None = None,
        instructions_per_second: int | None = DEFAULT_INSTRUCTIONS_PER_SECOND,
        frame_rate: int = DEFAULT_FRAME_RATE,
        stack_capacity: int | None = DEFAULT_STACK_CAPACITY,
        shift_uses_vy: bool = True,
        strict: bool = False,
        seed: int | None = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Inicializa la máquina.

        Args:
            rom_path: Ruta opcional a una ROM para cargarla directamente
            font: Tabla de fuente de 80 bytes (por defecto la fuente estándar 0-F)
            instructions_per_second: Objetivo de ejecución; None = sin límite
            frame_rate: Frames por segundo entregados al renderer
            stack_capacity: Profundidad máxima de la pila (None = sin límite)
            shift_uses_vy: Semántica legacy de 8xy6/8xyE
            strict: Los opcodes desconocidos lanzan UnknownOpcode
            seed: Semilla del generador aleatorio (Cxkk)
            clock: Fuente de tiempo en segundos (inyectable para tests)
            sleep: Función de espera (inyectable para tests)

        Raises:
            FileNotFoundError: Si la ROM no existe
            ValueError: Si la ROM está vacía o la fuente no mide 80 bytes
        """
        self._memory = Memory()
        self._display = Display()
        self._timer = Timer()
        self._keypad = Keypad()
        self._cpu = CPU(
            self._memory,
            self._display,
            self._timer,
            self._keypad,
            stack_capacity=stack_capacity,
            shift_uses_vy=shift_uses_vy,
            strict=strict,
            seed=seed,
        )
        self._system_clock = SystemClock(
            self._timer,
            clock=clock,
            instructions_per_second=instructions_per_second,
            frame_rate=frame_rate,
        )
        self._sleep = sleep

        self._rom: Rom | None = None
        self._renderer: Renderer | None = None
        self._beeper: Beeper | None = None

        self.running: bool = False
        self.frame_count: int = 0
        # Último fallo fatal (si la ejecución se detuvo por un error)
        self.fault: Chip8Error | None = None

        self.load_font(FONT_SET if font is None else font)

        if rom_path is not None:
            self.load_rom(rom_path)

        logger.info("Sistema Chip8 inicializado")

    # ========== Carga (colaboradores externos) ==========

    def load_rom(self, rom: str | Path | bytes | bytearray) -> int:
        """
        Carga un programa en 0x200.

        Args:
            rom: Ruta a un archivo ROM o bytes del programa

        Returns:
            Bytes copiados (la ROM se trunca en silencio si no cabe)
        """
        if isinstance(rom, (bytes, bytearray)):
            return self._memory.load_program(rom)

        self._rom = Rom(rom)
        return self._memory.load_program(self._rom.data)

    def load_font(self, font: bytes | bytearray) -> None:
        """Copia la tabla de fuente (80 bytes) en 0x050."""
        self._memory.load_font(font)

    def attach_renderer(self, renderer: Renderer | None) -> None:
        self._renderer = renderer

    def attach_beeper(self, beeper: Beeper | None) -> None:
        self._beeper = beeper

    # ========== Ejecución ==========

    def tick(self) -> Instruction | None:
        """
        Ejecuta un ciclo: avanza los timers con el tiempo real y ejecuta una instrucción.

        Returns:
            La instrucción ejecutada, o None si la CPU espera una tecla (Fx0A)
        """
        self._system_clock.update_timers()
        return self._cpu.step()

    def stop(self) -> None:
        """Solicita detener run() en el siguiente límite de instrucción."""
        self.running = False

    def run(
        self,
        max_instructions: int | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> int:
        """
        Ejecuta el bucle principal.

        En cada vuelta:
        1. Procesa los eventos de entrada (al menos tan a menudo como se ejecutan
           instrucciones)
        2. Comprueba la cancelación (solo entre instrucciones)
        3. Avanza los timers con el tiempo real transcurrido
        4. Ejecuta las instrucciones que tocan según el throttle
        5. Si vence un frame: render y audio

        Args:
            max_instructions: Detener tras este número de ciclos (None = sin límite)
            should_stop: Callable consultado entre instrucciones; si devuelve True
                se detiene el bucle

        Returns:
            Número de ciclos ejecutados

        Raises:
            MemoryFault, StackUnderflow, StackOverflow: Fallos fatales; el bucle se
                detiene tras los cambios ya aplicados del ciclo en curso
            UnknownOpcode: Solo en modo estricto
        """
        clock = self._system_clock
        executed = 0
        self.running = True
        self.fault = None
        clock.restart()

        def cancelled() -> bool:
            if not self.running:
                return True
            if should_stop is not None and should_stop():
                self.running = False
                return True
            return max_instructions is not None and executed >= max_instructions

        logger.info("Ejecutando bucle principal")

        try:
            while True:
                self._poll_input()
                if cancelled():
                    break

                now = clock.now()
                budget = clock.instructions_due(now)

                for _ in range(budget):
                    if cancelled():
                        break
                    clock.update_timers()
                    self._cpu.step()
                    executed += 1

                if clock.frame_due(clock.now()):
                    self._present()
                elif budget == 0:
                    self._sleep(clock.idle_time(clock.now()))

        except KeyboardInterrupt:
            # Salir limpiamente con Ctrl+C
            pass

        except Chip8Error as e:
            self.fault = e
            logger.error(
                f"Fallo fatal en PC=0x{self._cpu.registers.get_pc():03X}: {e}"
            )
            raise

        finally:
            self.running = False
            if self._beeper is not None:
                self._beeper.update(False)
            if self._renderer is not None:
                self._renderer.quit()

        logger.info(f"Bucle detenido tras {executed} ciclos")
        return executed

    def _poll_input(self) -> None:
        """Procesa los eventos del host: teclado al Keypad y petición de cierre."""
        if self._renderer is not None and not self._renderer.handle_events(self._keypad):
            self.running = False

    def _present(self) -> None:
        """Entrega el frame al renderer y actualiza el audio."""
        if self._renderer is not None:
            if self._display.is_dirty():
                self._renderer.render_frame(self._display.snapshot())
                self._display.mark_presented()

        if self._beeper is not None:
            self._beeper.update(self._timer.sound_active)

        self.frame_count += 1
        if self.frame_count % self.HEARTBEAT_FRAMES == 0:
            logger.info(
                f"💓 Heartbeat ... PC=0x{self._cpu.registers.get_pc():03X} | "
                f"Instrucciones={self._cpu.instruction_count} | "
                f"DT={self._timer.read_delay()} ST={self._timer.read_sound()}"
            )

    # ========== Depuración ==========

    def disassemble(self, addr: int, count: int) -> list[str]:
        """
        Desensambla count instrucciones a partir de addr.

        Returns:
            Líneas con formato '0x200: 00E0  CLS'
        """
        lines = []
        for offset in range(count):
            pc = addr + offset * 2
            instruction = decode(self._memory.read_word(pc))
            lines.append(f"0x{pc:03X}: {instruction.word:04X}  {disassemble(instruction)}")
        return lines

    # ========== Accesores ==========

    @property
    def registers(self) -> Registers:
        return self._cpu.registers

    def get_cpu(self) -> CPU:
        return self._cpu

    def get_memory(self) -> Memory:
        return self._memory

    def get_display(self) -> Display:
        return self._display

    def get_timer(self) -> Timer:
        return self._timer

    def get_keypad(self) -> Keypad:
        return self._keypad

    def get_rom(self) -> Rom | None:
        return self._rom
