import logging
import random
from dataclasses import dataclass

logger = logging.getLogger("cr8")


@dataclass(frozen=True)
class FallbackTopic:
    name: str
    keywords: tuple[str, ...]
    candidates: tuple[str, ...]

    def matches(self, lowered_prompt: str) -> bool:
        # The catch-all topic has no keywords
        if not self.keywords:
            return True
        return any(k in lowered_prompt for k in self.keywords)


GREETING = FallbackTopic(
    name="greeting",
    keywords=("hello", "hi", "hey", "greetings", "good morning", "good afternoon", "good evening"),
    candidates=(
        "Hello! Welcome to CR8 Digital Creative Agency! 🎨 I'm here to help you unleash your "
        "creative vision. Whether you're looking for video editing, motion graphics, animation, "
        "or logo design, we've got you covered. What creative project are you thinking about?",
        "Hi there, and welcome to CR8! We help brands tell their story through video editing, "
        "motion graphics and animation. Tell me a bit about what you'd like to create!",
        "Hey! Great to have you here at CR8. 👋 From short promo videos to full motion graphics "
        "packages, we love bringing ideas to life. What are you working on?",
    ),
)

SERVICES = FallbackTopic(
    name="services",
    keywords=("service", "what do you do", "help", "offer"),
    candidates=(
        "At CR8, we specialize in bringing your creative vision to life! Our services include:\n\n"
        "🎬 Video Editing (Short & Long Form)\n"
        "🎨 Motion Graphics & Animation\n"
        "✨ Logo Animation\n"
        "🎯 Graphic Design\n\n"
        "We offer three service levels:\n"
        "• LOE 1: Basic projects (30s-1m videos, basic motion graphics)\n"
        "• LOE 2: Standard projects (up to 20m videos, intro animations)\n"
        "• LOE 3: Advanced projects (VFX, templates, full motion graphics)\n\n"
        "What type of project did you have in mind?",
        "CR8 covers the whole visual storytelling toolkit: graphic design, video editing, "
        "motion graphics, animation and logo animation. Projects range from quick social clips "
        "(LOE 1) to advanced VFX work with custom templates (LOE 3). Which of these fits your "
        "project best?",
    ),
)

PRICING = FallbackTopic(
    name="pricing",
    keywords=("price", "pricing", "cost", "package", "quote", "budget", "how much"),
    candidates=(
        "Great question! Our pricing varies based on the complexity and scope of your project. "
        "We offer three main service levels (LOE 1-3) and custom packages to fit your specific "
        "needs.\n\n"
        "To give you the most accurate quote, I'd love to learn more about your project:\n"
        "• What type of video/graphics do you need?\n"
        "• How long should the final product be?\n"
        "• Do you need motion graphics or special effects?\n\n"
        "Feel free to email us at creativscr8@gmail.com for a detailed quote!",
        "We keep things flexible: pick one of our packages (LOE 1 basic, LOE 2 standard, "
        "LOE 3 advanced) or mix and match services into a custom package. Email "
        "creativscr8@gmail.com with a short brief and we'll send you a tailored quote.",
    ),
)

CONTACT = FallbackTopic(
    name="contact",
    keywords=("contact", "email", "reach", "phone", "portfolio"),
    candidates=(
        "You can reach us at:\n"
        "📧 creativscr8@gmail.com (primary)\n"
        "📧 eldriv@proton.me (alternative)\n\n"
        "🌐 Check out our portfolio: https://cr8-agency.netlify.app/#works\n\n"
        "We typically respond within 24 hours and would love to discuss your creative project!",
        "The quickest way to reach CR8 is by email at creativscr8@gmail.com (or "
        "eldriv@proton.me). You can browse our recent work at "
        "https://cr8-agency.netlify.app/#works. We usually reply within a day!",
    ),
)

PROCESS = FallbackTopic(
    name="process",
    keywords=("process", "how do you work", "workflow", "timeline", "storyboard", "revision"),
    candidates=(
        "Our creative process is designed to bring your vision to life efficiently:\n\n"
        "1. **Understanding Your Brand** - We dive deep into your vision and goals\n"
        "2. **Drafting Storyboard** (24-48 hours) - We create a visual roadmap\n"
        "3. **Production** (12-72 hours) - Our team works their magic\n"
        "4. **Client Approval** - We gather your feedback through Frame.io\n"
        "5. **Revision** - We perfect it based on your input\n\n"
        "This process ensures we align with your brand and deliver exactly what you envision!",
        "Every CR8 project follows five steps: understanding your brand, a storyboard draft "
        "(24-48 hours), production (12-72 hours), your approval through Frame.io, and "
        "revisions. The first three revision rounds are included. Want to get started?",
    ),
)

DEFAULT = FallbackTopic(
    name="default",
    keywords=(),
    candidates=(
        "Thanks for reaching out to CR8! 🎨 We're passionate about helping bring creative "
        "visions to life through video editing, motion graphics, and animation.\n\n"
        "I'd love to learn more about your project! Whether you need a short promotional video, "
        "logo animation, or complex motion graphics, we have the expertise to make it happen.\n\n"
        "What creative challenge can we help you solve today?",
        "Thanks for your message! CR8 is a creative agency focused on video editing, motion "
        "graphics, animation and graphic design. Tell me about your idea and I'll point you to "
        "the right service, or email creativscr8@gmail.com to talk to the team directly.",
    ),
)

# First match wins
TOPICS: tuple[FallbackTopic, ...] = (GREETING, SERVICES, PRICING, CONTACT, PROCESS, DEFAULT)


class FallbackGenerator:
    """Answers a prompt with canned CR8 text when Gemini can't."""

    def __init__(self, rng: random.Random | None = None, topics: tuple[FallbackTopic, ...] = TOPICS):
        if not topics or topics[-1].keywords:
            raise ValueError("The last fallback topic must be a keyword-less catch-all")
        self._rng = rng or random.Random()
        self._topics = topics

    @property
    def topics(self) -> tuple[FallbackTopic, ...]:
        return self._topics

    def select_topic(self, prompt: str) -> FallbackTopic:
        lowered = prompt.lower()
        for topic in self._topics:
            if topic.matches(lowered):
                return topic
        return self._topics[-1]

    def generate(self, prompt: str) -> str:
        topic = self.select_topic(prompt)
        logger.debug("Fallback topic: %s", topic.name)
        return self._rng.choice(topic.candidates)


fallback_generator = FallbackGenerator()
