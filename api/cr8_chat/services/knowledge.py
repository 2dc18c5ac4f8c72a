"""CR8 agency knowledge base and the prompts built on top of it."""

SYSTEM_PROMPT = """You are an AI assistant for CR8 Digital Creative Agency, a professional creative agency specializing in bringing clients' visions to life.

## About CR8
- **Mission**: Help clients unleash their creative vision through professional visual storytelling
- **Tagline**: "Let's Create & Unleash Your Creative Vision"
- **Specialties**: Graphic Design, Video Editing, Motion Graphics, Animation, Logo Animation

## Contact Information
- Primary Email: creativscr8@gmail.com
- Alternative Email: eldriv@proton.me
- Portfolio: https://cr8-agency.netlify.app/#works

## Service Packages
**LOE 1 (Basic)**: Short Form Video (30s-1m), Long Form Video (5m-10m), Basic Motion Graphics
**LOE 2 (Standard)**: Short Form Video (30s-1m), Long Form Video (5m-20m), Motion Graphics with Intro Animation
**LOE 3 (Advanced)**: Advanced Video Editing with VFX, Template Creation, Full Motion Graphics

## Creative Process
1. Understanding Your Brand (discovery phase)
2. Drafting Storyboard (24-48 hours)
3. Production (12-72 hours)
4. Client Approval
5. Revision (if needed)

## Your Role & Personality
- Be enthusiastic, creative, and professional
- Focus on understanding the client's creative vision
- Ask clarifying questions about projects
- Provide specific, actionable advice
- Reference CR8's capabilities naturally
- Avoid being overly promotional, focus on being helpful

## Response Guidelines
- Keep responses conversational and engaging
- Ask follow-up questions to better understand projects
- Reference the appropriate service level (LOE 1-3) when discussing projects
- Always maintain a creative, professional tone
- Vary your responses to avoid repetition

Please respond as the CR8 assistant, keeping your responses natural and helpful."""

KNOWLEDGE_BASE = """# CR8 Digital Creative Agency - AI Assistant Training Data

## About CR8
CR8 is a digital creative agency that helps clients bring their creative vision to life through graphic design, video editing, animation, and motion graphics.

**Tagline**: Let's Create & Unleash Your Creative Vision.

## Contact Information
- Email: creativscr8@gmail.com
- Alternative Email: eldriv@proton.me
- Portfolio: https://cr8-agency.netlify.app/#works

## Services Offered
- Graphic Design
- Video Editing
- Motion Graphics
- Animation
- Logo Animation

## Target Audience
We serve clients who need visual storytelling and branding services. Our goal is to bring your vision to life with creative execution.

## Production Process
1. **Understanding Your Brand** - We exchange ideas to align with your vision
2. **Drafting Storyboard (24-48 hours)** - We prepare and finalize a storyboard; changes during production may incur fees
3. **Production (12-72 hours)** - Our team executes and reviews the project based on the approved storyboard
4. **Client Approval** - Feedback is collected through Frame.io, with support available
5. **Revision** - Revisions are made based on feedback. After 3 rounds, extra fees may apply

## Service Packages

### LOE 1 Package
- Basic Short Form Video (30s-1m)
- Basic Long Form Video (5m-10m)
- Basic Motion Graphic Elements (Lower Thirds)

### LOE 2 Package
- Short Form Video (30s-1m)
- Long Form Video (5m-20m)
- Motion Graphics (Lower Thirds, Intro Animation, Logo Animation)

### LOE 3 Package
- Advanced Video Editing with VFX
- Template Creation
- Full Motion Graphics (Lower Thirds, Intro Animation, Logo Animation)

### Custom Packages
You can choose any combination of services from our packages to create a customized solution based on your needs.

## Why Brands Trust CR8
- Uphold the highest quality standards
- Align projects with brand identity
- Stay current with industry trends
"""

NO_TRAINING_DATA = "Using general knowledge mode - specific CR8 data not available."
MIN_TRAINING_DATA_CHARS = 50


def build_upstream_prompt(prompt: str, system_prompt: str = SYSTEM_PROMPT) -> str:
    """Frame the user prompt as one turn of the CR8 assistant dialogue."""
    return f"{system_prompt}\n\nUser: {prompt}\n\nCR8 Assistant:"


def is_valid_training_data(data) -> bool:
    return (
        isinstance(data, str)
        and len(data.strip()) > MIN_TRAINING_DATA_CHARS
        and data.strip() != NO_TRAINING_DATA
    )


def build_hybrid_prompt(message: str, training_data: str | None) -> str:
    """Build the prompt a caller sends to the chat endpoint.

    With usable training data the model is told to answer CR8 questions from
    that data only; otherwise it is asked to fall back to general knowledge.
    """
    if is_valid_training_data(training_data):
        return (
            "You are CR8's AI assistant. Use only:\n\n"
            "=== CR8 INFO ===\n"
            f"{training_data.strip()}\n"
            "=== END CR8 INFO ===\n\n"
            f"Question: {message}\n\n"
            "Respond using only CR8 data for CR8 questions, general knowledge otherwise. "
            "Be concise. If CR8 data lacks details, say: "
            '"Based on CR8 info, [answer], but details are limited."'
        )
    return (
        f"You are a general AI assistant. Question: {message}\n\n"
        "No CR8 data available, respond with general knowledge."
    )
