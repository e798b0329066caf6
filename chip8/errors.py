"""
Excepciones de la máquina virtual CHIP-8

Taxonomía de fallos:
- MemoryFault: Dirección calculada fuera del rango direccionable (0x000-0xFFF). Fatal.
- StackUnderflow: 00EE ejecutado con la pila vacía. Fatal.
- StackOverflow: 2nnn ejecutado con la pila llena. Fatal.
- UnknownOpcode: Patrón de instrucción que no está en la tabla. NO fatal:
  la CPU lo registra en el log y continúa (solo se lanza en modo estricto).

Todas heredan de Chip8Error para que el bucle principal pueda capturarlas
en un único punto.
"""

from __future__ import annotations


class Chip8Error(RuntimeError):
    """Error base de la máquina virtual."""


class MemoryFault(Chip8Error, IndexError):
    """Acceso a una dirección fuera de 0x000-0xFFF."""

    def __init__(self, addr: int, size: int = 1) -> None:
        self.addr = addr
        self.size = size
        if size > 1:
            message = f"Acceso fuera de memoria: 0x{addr:04X}..0x{addr + size - 1:04X}"
        else:
            message = f"Acceso fuera de memoria: 0x{addr:04X}"
        super().__init__(message)


class StackError(Chip8Error):
    """Error de la pila de llamadas."""


class StackUnderflow(StackError):
    """Retorno (00EE) con la pila vacía."""


class StackOverflow(StackError):
    """Llamada (2nnn) con la pila llena."""


class UnknownOpcode(Chip8Error, NotImplementedError):
    """Instrucción desconocida (solo se lanza en modo estricto)."""

    def __init__(self, word: int, addr: int) -> None:
        self.word = word
        self.addr = addr
        super().__init__(f"Opcode desconocido 0x{word:04X} en 0x{addr:03X}")
