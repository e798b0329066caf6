"""
Renderer - Motor de Renderizado Gráfico

Este módulo visualiza el framebuffer de la CHIP-8 usando Pygame y traduce los
eventos del teclado del host a las 16 teclas lógicas.

El renderer nunca recibe la referencia interna del Display: trabaja sobre el
snapshot de solo lectura (array numpy (32, 64) con valores 0/1) que le entrega
la máquina en cada frame. El mapeo de índices a RGB se hace de forma
vectorizada con numpy y se vuelca con pygame.surfarray.

Mapeo de teclado (disposición clásica sobre el bloque izquierdo del teclado QWERTY):

    Teclado host     Teclado CHIP-8
    1 2 3 4          1 2 3 C
    Q W E R          4 5 6 D
    A S D F          7 8 9 E
    Z X C V          A 0 B F
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import pygame

from .display import DISPLAY_HEIGHT, DISPLAY_WIDTH

if TYPE_CHECKING:
    from ..io.keypad import Keypad

logger = logging.getLogger(__name__)

# Colores (índice 0 = píxel apagado, 1 = encendido)
PALETTE_DEFAULT = np.array(
    [
        (8, 24, 32),     # 0: Fondo
        (224, 248, 208), # 1: Píxel encendido
    ],
    dtype=np.uint8,
)

KEY_MAP: dict[int, int] = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def frame_to_rgb(frame: np.ndarray, palette: np.ndarray = PALETTE_DEFAULT) -> np.ndarray:
    """
    Convierte un framebuffer (alto, ancho) de 0/1 en un array RGB para surfarray.

    surfarray espera el formato (ancho, alto, canales), así que el resultado se
    devuelve transpuesto: forma (64, 32, 3).
    """
    return palette[frame.T]


class Renderer:
    """
    Ventana de Pygame que muestra el framebuffer escalado.

    También actúa como fuente de entrada: handle_events() actualiza el Keypad y
    devuelve False cuando el usuario pide salir (cerrar ventana o Escape).
    """

    def __init__(self, scale: int = 10, title: str = "Chip8 VM") -> None:
        """
        Inicializa el renderer con Pygame.

        Args:
            scale: Factor de escala para la ventana (p.ej. 10 = 640x320)
            title: Título de la ventana
        """
        self.scale = scale
        self.window_width = DISPLAY_WIDTH * scale
        self.window_height = DISPLAY_HEIGHT * scale
        self.palette = PALETTE_DEFAULT.copy()

        pygame.display.init()
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption(title)

        # Framebuffer interno a resolución nativa; se escala al volcarlo en la ventana
        self.buffer = pygame.Surface((DISPLAY_WIDTH, DISPLAY_HEIGHT))

        logger.info(f"Renderer inicializado: {self.window_width}x{self.window_height} (scale={scale})")

    def render_frame(self, frame: np.ndarray) -> None:
        """
        Dibuja un frame completo.

        Args:
            frame: Snapshot del Display, forma (32, 64), valores 0/1
        """
        pygame.surfarray.blit_array(self.buffer, frame_to_rgb(frame, self.palette))
        scaled = pygame.transform.scale(self.buffer, (self.window_width, self.window_height))
        self.screen.blit(scaled, (0, 0))
        pygame.display.flip()

    def handle_events(self, keypad: Keypad | None = None) -> bool:
        """
        Maneja eventos de Pygame (cierre de ventana y teclado para el Keypad).

        IMPORTANTE: En macOS, pygame.event.pump() es necesario para que la ventana se actualice.

        Returns:
            True si se debe continuar ejecutando, False si se debe cerrar
        """
        pygame.event.pump()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False

            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return False

            if keypad is None:
                continue

            if event.type == pygame.KEYDOWN:
                key = KEY_MAP.get(event.key)
                if key is not None:
                    keypad.press(key)
            elif event.type == pygame.KEYUP:
                key = KEY_MAP.get(event.key)
                if key is not None:
                    keypad.release(key)

        return True

    def quit(self) -> None:
        """Cierra la ventana de Pygame limpiamente."""
        pygame.display.quit()
        logger.info("Renderer cerrado")
