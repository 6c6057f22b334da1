from __future__ import annotations

from text_al_pipeline.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
