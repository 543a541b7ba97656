"""Unity installer backend (platform-specific install/uninstall/discovery).

Core design goals:
- One installation lifecycle in flight at a time
- Editor before any module package
- Collision-free install directories from caller templates
- Elevated installer runs with captured output
- Discovery by probing well-known directories
"""

__all__ = []
