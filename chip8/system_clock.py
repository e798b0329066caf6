"""
SystemClock: Coordinación de las tres cadencias de la máquina CHIP-8.

Sobre el mismo estado conviven tres ritmos independientes:
1. Ejecución de instrucciones: tan rápido como permita el host, u opcionalmente
   limitado a un objetivo de instrucciones por segundo (jugabilidad)
2. Timers DT/ST: 60 decrementos por segundo
3. Presentación: entrega del framebuffer al renderer (por frame)

Los tres se calculan comparando el tiempo real transcurrido contra umbrales;
ninguno se deduce del número de instrucciones ejecutadas.

Autor: Chip8 VM Team
Licencia: MIT
"""

from __future__ import annotations

import time
from typing import Callable

from .io.timer import Timer

DEFAULT_INSTRUCTIONS_PER_SECOND = 700
DEFAULT_FRAME_RATE = 60

# Límite de instrucciones por lote para que un host lento (o una pausa larga)
# no provoque una ráfaga enorme de instrucciones sin presentar ni leer eventos
MAX_INSTRUCTIONS_PER_BATCH = 1000


class Cadence:
    """
    Ritmo fijo medido en tiempo real.

    due() devuelve cuántos periodos completos han transcurrido desde la última
    consulta y adelanta la referencia exactamente esos periodos (el resto
    fraccionario se conserva para la siguiente consulta).
    """

    def __init__(self, frequency_hz: float, start: float = 0.0) -> None:
        if frequency_hz <= 0:
            raise ValueError(f"Frecuencia inválida: {frequency_hz}")
        self.frequency_hz = frequency_hz
        self.period = 1.0 / frequency_hz
        self._reference = start

    def reset(self, now: float) -> None:
        self._reference = now

    def due(self, now: float) -> int:
        elapsed = now - self._reference
        count = int(elapsed * self.frequency_hz + 1e-9)
        if count <= 0:
            return 0
        self._reference += count * self.period
        return count

    def time_until_next(self, now: float) -> float:
        """Segundos que faltan para el siguiente periodo (0 si ya vence)."""
        return max(self._reference + self.period - now, 0.0)


class SystemClock:
    """
    Reloj maestro que reparte el tiempo real entre instrucciones, timers y frames.

    Responsabilidades:
    - Avanzar los timers según el tiempo real transcurrido (60 Hz)
    - Calcular cuántas instrucciones tocan en este instante (throttle)
    - Decidir cuándo toca presentar un frame
    """

    def __init__(
        self,
        timer: Timer,
        clock: Callable[[], float] = time.perf_counter,
        instructions_per_second: int | None = DEFAULT_INSTRUCTIONS_PER_SECOND,
        frame_rate: int = DEFAULT_FRAME_RATE,
    ) -> None:
        """
        Inicializa el reloj del sistema.

        Args:
            timer: Timers DT/ST que se avanzan con el tiempo real
            clock: Fuente de tiempo en segundos (inyectable para tests)
            instructions_per_second: Objetivo de ejecución; None = sin límite
            frame_rate: Frames por segundo que se entregan al renderer
        """
        self._timer = timer
        self._clock = clock
        now = clock()
        self._last_timer_update = now
        self._instructions = (
            Cadence(instructions_per_second, now) if instructions_per_second else None
        )
        self._frames = Cadence(frame_rate, now)

    def now(self) -> float:
        return self._clock()

    def restart(self) -> None:
        """Reinicia las referencias de tiempo (p.ej. al empezar run())."""
        now = self._clock()
        self._last_timer_update = now
        if self._instructions is not None:
            self._instructions.reset(now)
        self._frames.reset(now)

    def update_timers(self, now: float | None = None) -> int:
        """
        Avanza los timers con el tiempo real transcurrido desde la última llamada.

        Se llama siempre entre instrucciones, de modo que el decremento es
        atómico respecto al ciclo de la CPU.

        Returns:
            Número de decrementos de 60 Hz aplicados
        """
        if now is None:
            now = self._clock()
        elapsed = now - self._last_timer_update
        self._last_timer_update = now
        return self._timer.tick(elapsed)

    def instructions_due(self, now: float) -> int:
        """Número de instrucciones que tocan ahora según el throttle."""
        if self._instructions is None:
            return 1
        return min(self._instructions.due(now), MAX_INSTRUCTIONS_PER_BATCH)

    def frame_due(self, now: float) -> bool:
        """True si ha vencido al menos un periodo de presentación."""
        return self._frames.due(now) > 0

    def idle_time(self, now: float) -> float:
        """Tiempo que se puede dormir hasta que venza la siguiente cadencia."""
        waits = [self._frames.time_until_next(now)]
        if self._instructions is not None:
            waits.append(self._instructions.time_until_next(now))
        return min(waits)
