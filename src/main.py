"""Script de ejecución.

Permite ejecutar la CLI con `python -m main` desde `src/`, además del
script `hostbridge` instalado.
"""

from __future__ import annotations

import sys

# Frames y textos van en UTF-8 aunque la consola de Windows use cp1252.
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
