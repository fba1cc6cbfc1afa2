"""
Chat pipeline — one user turn from raw input to a collaboration stream.
Kept separate from studio.py so the facade stays about lifecycle.
"""

import logging
from dataclasses import replace
from typing import Optional

from orchestration.collaboration import CollaborationResult, CollaborationStream
from orchestration.context import ProjectContext
from orchestration.messages import AgentRole
from vision.types import ImageBuffer

logger = logging.getLogger(__name__)


class _ChatPipelineMixin:
    """Mixin providing the chat() entry points for RemodelStudio."""

    async def chat(self, message: str, image: Optional[ImageBuffer] = None,
                   context: Optional[ProjectContext] = None,
                   requested_role: Optional[AgentRole] = None) -> CollaborationStream:
        """Prepare a turn and return its stream. Iterate it (or collect()) to run it.

        Flow:
          1. Image, if any, goes through the vision pipeline (off the event loop)
          2. The analysis is merged into the project context
          3. The router picks the primary agent and collaborators
          4. The orchestrator streams primary, then collaborators concurrently
        """
        if not self.ready:
            raise RuntimeError("Studio not started. Call start() before chat().")

        if context is None:
            context = ProjectContext()
        else:
            context = replace(context, preferences=list(context.preferences))
        if image is not None:
            context.has_image = True
            context.analysis = await self.analyze_image(image)

        stream = self.orchestrator.respond(message, context, requested_role)
        self._streams.add(stream)
        logger.info("Chat turn: primary=%s collaborators=%s",
                    stream.plan.primary.value,
                    [r.value for r in stream.plan.collaborators])
        return stream

    async def chat_once(self, message: str, image: Optional[ImageBuffer] = None,
                        context: Optional[ProjectContext] = None,
                        requested_role: Optional[AgentRole] = None) -> Optional[CollaborationResult]:
        """Run a whole turn and return the merged result."""
        stream = await self.chat(message, image, context, requested_role)
        return await stream.collect()
