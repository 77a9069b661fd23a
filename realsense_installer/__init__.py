"""RealSense SDK installer for single-board computers (Python-first, step-driven).

Core design goals:
- Fail-fast, ordered steps
- Idempotent swap/repository handling
- System services behind narrow interfaces
- Centralized logging
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
