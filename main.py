#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Chip8 VM - Máquina virtual CHIP-8
Punto de entrada principal
"""

import argparse
import logging
import sys

from chip8.errors import Chip8Error
from chip8.machine import Chip8
from chip8.memory.rom import load_font_file
from chip8.system_clock import DEFAULT_INSTRUCTIONS_PER_SECOND

# Configurar logging básico
# ERROR: Solo errores fatales. Silencio total para máximo rendimiento.
logging.basicConfig(
    level=logging.ERROR,
    format="%(message)s",
    force=True,  # Forzar reconfiguración
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Chip8 VM - Intérprete de programas CHIP-8"
    )
    parser.add_argument(
        "rom",
        nargs="?",
        type=str,
        help="Ruta al archivo ROM (.ch8)",
    )
    parser.add_argument(
        "--font",
        type=str,
        default=None,
        help="Tabla de fuente externa (volcado plano de 80 bytes)",
    )
    parser.add_argument(
        "--ips",
        type=int,
        default=DEFAULT_INSTRUCTIONS_PER_SECOND,
        help=f"Instrucciones por segundo (0 = sin límite, por defecto {DEFAULT_INSTRUCTIONS_PER_SECOND})",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=10,
        help="Factor de escala de la ventana (por defecto 10 = 640x320)",
    )
    parser.add_argument(
        "--modern-shift",
        action="store_true",
        help="8xy6/8xyE desplazan Vx en lugar de Vy (dialecto CHIP-48)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Detener la ejecución ante un opcode desconocido",
    )
    parser.add_argument(
        "--mute",
        action="store_true",
        help="Desactivar el pitido del timer de sonido",
    )
    parser.add_argument(
        "--disassemble",
        type=int,
        metavar="N",
        default=0,
        help="Mostrar las N primeras instrucciones del programa y salir",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Activar modo debug con trazas detalladas de instrucciones",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Activar modo verbose (muestra mensajes INFO, incluyendo heartbeat)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Función principal"""
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    print("Chip8 VM - Sistema Iniciado")
    print("=" * 50)

    if not args.rom:
        print("Error: Se requiere especificar una ROM")
        print("Uso: python main.py <ruta_a_rom.ch8> [--debug]")
        return 1

    try:
        font = load_font_file(args.font) if args.font else None
        chip8 = Chip8(
            args.rom,
            font=font,
            instructions_per_second=args.ips or None,
            shift_uses_vy=not args.modern_shift,
            strict=args.strict,
        )
    except (FileNotFoundError, IOError, ValueError) as e:
        print(f"\n❌ Error al cargar ROM: {e}")
        return 1

    rom = chip8.get_rom()
    if rom is not None:
        info = rom.get_info()
        print(f"\n📦 ROM cargada:")
        print(f"   Nombre: {info['name']}")
        print(f"   Tamaño: {info['size']} bytes")
        if info["truncated"]:
            print("   ⚠️  La ROM no cabe entera en memoria y se ha truncado")

    if args.disassemble:
        for line in chip8.disassemble(chip8.registers.get_pc(), args.disassemble):
            print(line)
        return 0

    # Colaboradores externos: requieren pygame
    try:
        from chip8.gpu.renderer import Renderer
        from chip8.io.audio import Beeper
    except ImportError:
        print("\n❌ ERROR: Pygame no está instalado.\n\nInstala con: pip install pygame-ce")
        return 1

    chip8.attach_renderer(Renderer(scale=args.scale))
    beeper = None if args.mute else Beeper()
    chip8.attach_beeper(beeper)

    print("\n✅ Sistema listo para ejecutar")
    print("   Presiona Escape o cierra la ventana para detener\n")

    try:
        chip8.run()
    except Chip8Error as e:
        print(f"\n❌ Error de ejecución: {e}")
        if args.debug or args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        if beeper is not None:
            beeper.quit()

    return 0


if __name__ == "__main__":
    sys.exit(main())
