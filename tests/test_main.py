"""
Tests del punto de entrada de línea de comandos (main.py)

Solo se prueban los caminos que no abren ventana.
"""

from main import build_parser, main


class TestCommandLine:
    """Tests de main()"""

    def test_defaults(self) -> None:
        args = build_parser().parse_args(["game.ch8"])
        assert args.rom == "game.ch8"
        assert args.ips == 700
        assert args.scale == 10
        assert not args.modern_shift
        assert not args.strict

    def test_missing_rom_argument(self, capsys) -> None:
        assert main([]) == 1
        assert "Se requiere especificar una ROM" in capsys.readouterr().out

    def test_rom_not_found(self, tmp_path, capsys) -> None:
        assert main([str(tmp_path / "missing.ch8")]) == 1
        assert "Error al cargar ROM" in capsys.readouterr().out

    def test_disassemble(self, tmp_path, capsys) -> None:
        rom_file = tmp_path / "test.ch8"
        rom_file.write_bytes(bytes([0x00, 0xE0, 0x6A, 0x2F, 0x12, 0x02]))
        assert main([str(rom_file), "--disassemble", "3"]) == 0
        out = capsys.readouterr().out
        assert "0x200: 00E0  CLS" in out
        assert "0x202: 6A2F  LD VA, 0x2F" in out
        assert "0x204: 1202  JP 0x202" in out

    def test_bad_font_file(self, tmp_path, capsys) -> None:
        rom_file = tmp_path / "test.ch8"
        rom_file.write_bytes(bytes([0x12, 0x00]))
        font_file = tmp_path / "font.bin"
        font_file.write_bytes(bytes(12))
        assert main([str(rom_file), "--font", str(font_file)]) == 1
