"""Voice guidance lines for each stage of the capture-and-analyze flow."""

from config import DEFAULT_GUIDANCE, GUIDANCE_PROMPTS

GUIDANCE_STAGES = tuple(GUIDANCE_PROMPTS)


def guidance_prompt(stage: str) -> str:
    return GUIDANCE_PROMPTS.get(stage, DEFAULT_GUIDANCE)
