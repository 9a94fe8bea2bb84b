"""
Build script for creating a standalone slocount executable using PyInstaller.

The CLI and its Python dependencies are bundled into a single file; no data
files are needed at runtime since the built-in language table lives in code.
"""

import PyInstaller.__main__  # type: ignore

PyInstaller.__main__.run(["main.py", "--onefile", "--name=slocount"])
