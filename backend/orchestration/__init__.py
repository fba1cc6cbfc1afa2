"""
Orchestration package — conversation plumbing between the user and the agents.

    messages.py       — AgentRole, AgentMessage, StreamChunk
    rate_limiter.py   — per-role minimum-interval gate
    streams.py        — cancellable response stream base
    gateway.py        — ModelGateway (route, pace, retry, fall back, commit)
    context.py        — project context injection
    agent_router.py   — keyword/intent role selection
    collaboration.py  — primary-then-concurrent fan-out and merge
    consensus.py      — CollaborativeDecision and the consensus rule
"""
