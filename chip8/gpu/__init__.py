"""
GPU - Salida de vídeo

Este módulo contiene los componentes relacionados con la pantalla de la CHIP-8:
- Display: Framebuffer 64x32 y composición de sprites con XOR
- Renderer: Ventana de visualización usando Pygame (chip8.gpu.renderer)
"""

from .display import DISPLAY_HEIGHT, DISPLAY_WIDTH, Display

__all__ = ["Display", "DISPLAY_HEIGHT", "DISPLAY_WIDTH"]
