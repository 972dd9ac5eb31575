"""Streamlit entry point for the Stellar liquidity pool manager.

This wrapper allows running the application via ``streamlit run app.py``
while keeping the actual implementation inside ``stellar_app``.
"""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from stellar_app.app import main

if __name__ == "__main__":
    main()
