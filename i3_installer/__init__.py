"""i3 desktop installer for Debian/Ubuntu (Python-first, step-driven).

Core design goals:
- Preferences resolved once, before anything touches the system
- Idempotent, convergent package groups
- Explicit fatal vs best-effort results per step
- Centralized logging
"""

__all__ = []
