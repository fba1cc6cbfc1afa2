"""
Configuration — static tables and internal constants for the whole backend.

User-configurable values (backends, pacing, memory depth, vision thresholds)
come from profile.yaml via profile_config. Routing tables, fallback chains,
vocabularies and thresholds here are code constants.
"""

from orchestration.messages import AgentRole

# ── Roles ──

ROLE_TITLES = {
    AgentRole.COORDINATOR: "Coordinator",
    AgentRole.VISION: "Vision Specialist",
    AgentRole.DESIGN: "Design Specialist",
    AgentRole.STRUCTURAL: "Structural Engineer",
    AgentRole.PROJECT_MANAGER: "Project Manager",
}

# Safety-first precedence, used for fan-out trimming and consensus tie-breaks
ROLE_PRIORITY = (
    AgentRole.STRUCTURAL,
    AgentRole.VISION,
    AgentRole.DESIGN,
    AgentRole.PROJECT_MANAGER,
)

MAX_COLLABORATION_ROLES = 3

# Word-prefix triggers that pull a specialist into a conversation
ROLE_TRIGGERS = {
    AgentRole.STRUCTURAL: ("wall", "remov", "structur", "load-bearing", "load bearing", "beam"),
    AgentRole.VISION: ("image", "photo", "picture", "see"),
    AgentRole.DESIGN: ("design", "style", "colo", "aesthetic"),
    AgentRole.PROJECT_MANAGER: ("budget", "timeline", "cost", "schedule", "permit"),
}

# ── Model Routing ──

PROVIDER_HOSTED = "openrouter"
PROVIDER_LOCAL = "ollama"

EFFICIENT_MODEL = "deepseek/deepseek-r1"
CAPABLE_MODEL = "openai/gpt-4o-mini"
CREATIVE_MODEL = "anthropic/claude-3.5-haiku"

DEFAULT_MAX_TOKENS = 1024
TOKENS_PER_WORD = 1.3

# Upper bounds (inclusive) of each size bucket, in estimated tokens
SIZE_BUCKETS = (
    ("standard", 4000),
    ("extended", 6000),
)
LARGEST_BUCKET = "large"

TEMPERATURE = {
    AgentRole.DESIGN: 0.8,
    AgentRole.COORDINATOR: 0.6,
    AgentRole.PROJECT_MANAGER: 0.4,
    AgentRole.VISION: 0.3,
    AgentRole.STRUCTURAL: 0.2,
}

# (role, size bucket) -> (provider, model_id)
ROUTING_TABLE = {
    (AgentRole.COORDINATOR, "standard"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
    (AgentRole.COORDINATOR, "extended"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
    (AgentRole.COORDINATOR, "large"): (PROVIDER_HOSTED, CAPABLE_MODEL),
    (AgentRole.VISION, "standard"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
    (AgentRole.VISION, "extended"): (PROVIDER_HOSTED, CAPABLE_MODEL),
    (AgentRole.VISION, "large"): (PROVIDER_HOSTED, CAPABLE_MODEL),
    (AgentRole.DESIGN, "standard"): (PROVIDER_HOSTED, CREATIVE_MODEL),
    (AgentRole.DESIGN, "extended"): (PROVIDER_HOSTED, CREATIVE_MODEL),
    (AgentRole.DESIGN, "large"): (PROVIDER_HOSTED, CREATIVE_MODEL),
    (AgentRole.STRUCTURAL, "standard"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
    (AgentRole.STRUCTURAL, "extended"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
    (AgentRole.STRUCTURAL, "large"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
    (AgentRole.PROJECT_MANAGER, "standard"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
    (AgentRole.PROJECT_MANAGER, "extended"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
    (AgentRole.PROJECT_MANAGER, "large"): (PROVIDER_HOSTED, EFFICIENT_MODEL),
}

# Tried in order after the routing-table route has used its retry
FALLBACK_CHAINS = {
    AgentRole.COORDINATOR: (
        (PROVIDER_HOSTED, CAPABLE_MODEL),
        (PROVIDER_LOCAL, "llama3.1"),
    ),
    AgentRole.VISION: (
        (PROVIDER_HOSTED, "google/gemini-flash-1.5"),
        (PROVIDER_LOCAL, "llava"),
    ),
    AgentRole.DESIGN: (
        (PROVIDER_HOSTED, CAPABLE_MODEL),
        (PROVIDER_LOCAL, "llama3.1"),
    ),
    AgentRole.STRUCTURAL: (
        (PROVIDER_HOSTED, CAPABLE_MODEL),
        (PROVIDER_LOCAL, "llama3.1"),
    ),
    AgentRole.PROJECT_MANAGER: (
        (PROVIDER_HOSTED, CAPABLE_MODEL),
        (PROVIDER_LOCAL, "llama3.1"),
    ),
}

# ── Degraded Responses ──

CANNED_RESPONSES = {
    AgentRole.COORDINATOR: (
        "I'm here to help with your remodeling project. Could you tell me more "
        "about what you'd like to accomplish?"
    ),
    AgentRole.VISION: (
        "I'd be happy to analyze your space once you share an image. Please "
        "describe what you're hoping to change."
    ),
    AgentRole.DESIGN: (
        "I can help you explore design options. What style or aesthetic are you "
        "drawn to for this project?"
    ),
    AgentRole.STRUCTURAL: (
        "For structural modifications, I recommend starting with photos of the "
        "area you want to change. Safety is our top priority."
    ),
    AgentRole.PROJECT_MANAGER: (
        "Let's break down your project into manageable phases. What's your "
        "timeline and budget for this remodeling work?"
    ),
}
CANNED_CONFIDENCE = 0.5
DEGRADED_NOTICE = (
    "(This specialist is temporarily unavailable; the reply above is a standard "
    "response, not a tailored analysis.)"
)

# ── Response Metadata ──

EXPERTISE_KEYWORDS = {
    AgentRole.VISION: ("see", "identify", "detect", "analyze", "visible"),
    AgentRole.DESIGN: ("style", "color", "aesthetic", "beautiful", "design"),
    AgentRole.STRUCTURAL: ("safe", "structural", "load-bearing", "code", "engineering"),
    AgentRole.COORDINATOR: ("recommend", "next", "step", "process", "plan"),
    AgentRole.PROJECT_MANAGER: ("timeline", "budget", "phase", "schedule", "cost"),
}
UNCERTAINTY_WORDS = ("might", "maybe", "possibly", "unclear", "unsure")
SUGGESTION_PATTERNS = (
    r"consider\s+[^.!?]+",
    r"you\s+could\s+[^.!?]+",
    r"try\s+[^.!?]+",
    r"recommend\s+[^.!?]+",
)
MAX_SUGGESTIONS_PER_PATTERN = 3
MAX_SUGGESTIONS = 5
INPUT_REQUEST_PATTERNS = (
    r"\?",
    r"what\s+type",
    r"\bwhich\s+",
    r"how\s+much",
    r"would\s+you\s+like",
    r"can\s+you\s+tell\s+me",
)
VOTE_REASONING_MAX_CHARS = 280

# ── Intents ──

# Declared order is match order; first match wins
COMMAND_PATTERNS = (
    (r"\btake\s+(?:a\s+)?(?:photo|picture)\b", "capture_photo"),
    (r"\banalyze\s+(?:this\s+|the\s+)?room\b", "analyze_room"),
    (r"\bremove\s+(?:the\s+|this\s+|a\s+)?wall\b", "remove_wall"),
    (r"\badd\s+(?:a\s+)?wall\b", "add_wall"),
    (r"\bchange\s+(?:the\s+)?style\b|\bchange\s+to\s+\w+\s+style\b", "change_style"),
    (r"\bshow\s+me\s+(?:the\s+)?options\b", "show_options"),
    (r"\bwhat\s+(?:would|will)\s+this\s+look\s+like\b", "preview_changes"),
    (r"\bcalculate\s+(?:the\s+)?cost\b", "calculate_cost"),
    (r"\bstart\s+(?:a\s+)?(?:new\s+)?project\b", "start_project"),
    (r"\bget\s+help\b", "get_help"),
    (r"\bsave\s+(?:this\s+)?design\b", "save_design"),
    (r"\bgo\s+back\b", "go_back"),
    (r"\bcancel\b", "cancel"),
    (r"\b(?:yes|okay|ok|sure)\b", "confirm"),
    (r"\b(?:no|nope)\b", "deny"),
)

CONSTRUCTION_VOCABULARY = (
    "wall", "ceiling", "floor", "window", "door", "kitchen", "bathroom",
    "bedroom", "living room", "hallway", "load bearing", "drywall",
    "hardwood", "tile", "carpet", "paint", "renovation", "remodel",
    "addition", "removal", "structural", "electrical", "plumbing",
    "hvac", "permit", "blueprint", "design", "style", "modern",
    "traditional", "contemporary", "budget", "timeline", "contractor",
)
STYLE_VOCABULARY = ("modern", "traditional", "contemporary", "rustic", "industrial")

INTENT_BASE_CONFIDENCE = 0.7
INTENT_MATCH_BONUS = 0.1
INTENT_VOCAB_BONUS = 0.05
INTENT_VOCAB_BONUS_CAP = 0.2
INTENT_LENGTH_PENALTY = 0.1
INTENT_MIN_LENGTH = 5
INTENT_MAX_LENGTH = 100

GUIDANCE_PROMPTS = {
    "camera_ready": (
        "I can see your camera is ready. Say 'take a photo' when you'd like me "
        "to analyze your space."
    ),
    "photo_taken": (
        "Great photo! I'm analyzing your room now. You can ask me to 'remove a "
        "wall' or 'change the style' when I'm done."
    ),
    "analysis_complete": (
        "Analysis complete! I can see several options for your space. Say 'show "
        "me options' to see what's possible."
    ),
    "modification_ready": (
        "I can help you visualize changes. Try saying 'remove the wall' or "
        "'change to modern style'."
    ),
    "error": (
        "I didn't catch that clearly. Could you repeat your request? You can say "
        "things like 'take a photo' or 'analyze this room'."
    ),
}
DEFAULT_GUIDANCE = "How can I help you with your remodeling project today?"

# ── Vision ──

# Request bound on raw images: side length and base64 body of a 4-channel image
MAX_IMAGE_SIDE = 4096
MAX_IMAGE_BASE64_CHARS = 4 * ((MAX_IMAGE_SIDE * MAX_IMAGE_SIDE * 4 + 2) // 3)
LUMA_WEIGHTS = (0.299, 0.587, 0.114)
PLANE_BAND_FRACTION = 0.3
PLANE_MAX_EDGE_DENSITY = 0.25
FLOOR_BASE_CONFIDENCE = 0.8
CEILING_BASE_CONFIDENCE = 0.7
WALL_BASE_CONFIDENCE = 0.5
WALL_MAX_CONFIDENCE = 0.9
OPENING_BASE_CONFIDENCE = 0.5
OPENING_COVERAGE_WEIGHT = 0.3
OPENING_MATCH_TOLERANCE = 12
OPENING_MIN_SIDE = 40
OPENING_MAX_FRAME_FRACTION = 0.9

CONDITION_THRESHOLDS = (
    (0.8, "excellent"),
    (0.6, "good"),
    (0.4, "fair"),
)
LOWEST_CONDITION = "poor"

VARIETY_BONUS = 0.05
MAX_OVERALL_CONFIDENCE = 0.95

BRIGHT_LUMINANCE = 150
DIM_LUMINANCE = 100
WARMTH_THRESHOLD = 20

DEFAULT_ROOM_WIDTH_FT = 12
DEFAULT_ROOM_HEIGHT_FT = 10

FALLBACK_ELEMENT_CONFIDENCE = 0.3
