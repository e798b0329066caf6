"""
Módulo de Entrada/Salida (I/O)

Contiene las clases para manejar los periféricos de la CHIP-8:
- Keypad: Teclado hexadecimal de 16 teclas
- Timer: Timers de retardo y sonido a 60 Hz
- Beeper: Pitido mientras el timer de sonido está activo (chip8.io.audio, requiere pygame)
"""

from .keypad import Keypad
from .timer import Timer

__all__ = ["Keypad", "Timer"]
