"""Punto de entrada: ``python -m hidro_tool`` abre la app Kivy."""

from __future__ import annotations

import logging

from hidro_tool.app import run_app


def main() -> int:
    """Configure logging and launch the GUI."""
    logging.basicConfig(
        level=logging.INFO, format="%(levelname)s %(name)s: %(message)s"
    )
    try:
        return run_app()
    except ImportError as exc:
        print(f"No se pudo iniciar la interfaz grafica: {exc}")
        print("Instala el extra de GUI: pip install 'hidro-tool[gui]'")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
