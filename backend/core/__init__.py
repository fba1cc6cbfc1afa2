"""
Core package — the RemodelStudio service facade.

Structure:
    studio.py        — RemodelStudio: construction, lifecycle, vision, intents, decisions
    chat_pipeline.py — chat() entry points (route, collaborate, stream)

Usage:
    from core import RemodelStudio
    studio = RemodelStudio(profile)
    await studio.start()
"""

from core.studio import RemodelStudio

__all__ = ["RemodelStudio"]
