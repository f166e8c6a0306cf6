from pathlib import Path

__all__ = [
    "__version__",
]

VERSION_PATH = Path(__file__).parent / "VERSION"

__version__ = VERSION_PATH.read_text().strip()
