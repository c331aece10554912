# epub_navigator/src/epub_navigator/__main__.py
from .main import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
