"""
Secure Prompt Manager Module

This module builds the prompts sent to the chat-completion gateway while keeping them
isolated from user data. User-supplied interview context (resume text, role, domain,
interview type) only ever reaches the prompt through templates with explicit
placeholders, after sanitization.

The module contains:
- PromptTemplate: A dataclass for secure prompt templates with placeholders
- SecurePromptManager: Builds the system prompt and the full message list
- sanitize_text: Utility function for text sanitization

Dependencies:
- dataclasses: For template data structures
- typing: For type hints
- re: For regex-based sanitization
- html: For HTML entity encoding
- loguru: For logging sanitization events
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import html
import re

from loguru import logger

from interview_assistant.schemas.main.conversation_message import ChatTurn
from interview_assistant.schemas.main.interview_context import InterviewContext

# Number of trailing conversation turns sent along with each question.
CONTEXT_WINDOW = 4

CLARIFY_PREFIX = "CLARIFY:"

def sanitize_text(text: str, max_length: int = 1000, escape_html: bool = True) -> str:
    """
    Sanitize text input to prevent injection attacks and ensure data safety.

    This function performs multiple sanitization steps:
    1. Optional HTML entity encoding
    2. Strips leading/trailing whitespace
    3. Removes null bytes and other control characters
    4. Configurable length limiting
    5. Normalizes unicode characters

    Args:
        text (str): The text to sanitize
        max_length (int): Maximum allowed length (default: 1000)
        escape_html (bool): Whether to HTML escape the text (default: True)

    Returns:
        str: The sanitized text

    Raises:
        ValueError: If text is None or empty after sanitization
    """
    if text is None:
        raise ValueError("Text cannot be None")

    text = str(text)

    if escape_html:
        text = html.escape(text)

    text = text.strip()

    # Remove null bytes and other control characters (except newlines and tabs)
    text = re.sub(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]', '', text)

    if len(text) > max_length:
        text = text[:max_length]
        logger.warning(f"Text truncated to {max_length} characters for security")

    text = text.encode('utf-8', errors='ignore').decode('utf-8')

    if not text:
        raise ValueError("Text cannot be empty after sanitization")

    return text

@dataclass
class PromptTemplate:
    """Secure prompt template with placeholders for safe data injection."""
    template: str
    placeholders: Dict[str, str]
    sanitization_config: Dict[str, Dict] = None  # Per-placeholder sanitization config

    def render(self, **kwargs) -> str:
        """
        Safely render the template with provided data.

        Args:
            **kwargs: Data to inject into placeholders

        Returns:
            str: Rendered prompt with sanitized data

        Raises:
            ValueError: If required placeholders are missing or data is invalid
        """
        missing_placeholders = set(self.placeholders.keys()) - set(kwargs.keys())
        if missing_placeholders:
            raise ValueError(f"Missing required placeholders: {missing_placeholders}")

        sanitized_data = {}
        for key, value in kwargs.items():
            if key in self.placeholders:
                config = self.sanitization_config.get(key, {}) if self.sanitization_config else {}
                max_length = config.get('max_length', 1000)
                escape_html = config.get('escape_html', True)

                sanitized_data[key] = sanitize_text(str(value), max_length=max_length, escape_html=escape_html)
            else:
                # Skip unknown keys to prevent injection
                logger.warning(f"Unknown placeholder key: {key}")
                continue

        try:
            return self.template.format(**sanitized_data)
        except KeyError as e:
            raise ValueError(f"Template rendering error: {e}") from e


BASE_PROMPT = (
    "You are an expert technical interviewer and coding mentor with deep knowledge of software "
    "development, algorithms, system design, and best practices. Your role is to help candidates "
    "excel in technical interviews by providing detailed, technically accurate responses."
)

RESPONSE_GUIDELINES = """Provide detailed, technically accurate responses that:

1. Technical Depth:
- Demonstrate deep understanding of computer science fundamentals
- Explain complex concepts clearly with examples
- Include code snippets when relevant (using proper syntax and best practices)
- Cover edge cases and performance considerations

2. Response Structure:
- Start with a high-level overview
- Break down complex topics into digestible parts
- Include specific examples and use cases
- Address both theoretical concepts and practical implementation

3. Key Areas to Cover:
- Data Structures & Algorithms
  * Time and space complexity analysis
  * Optimization techniques
  * Trade-offs between different approaches
- System Design
  * Scalability considerations
  * Design patterns
  * Architecture best practices
- Coding Best Practices
  * Clean code principles
  * Testing strategies
  * Performance optimization
  * Security considerations

4. Problem-Solving Approach:
- Break down problems systematically
- Consider multiple solutions
- Explain trade-offs between different approaches
- Discuss real-world applications

5. Technical Communication:
- Use precise technical terminology
- Explain complex concepts clearly
- Provide relevant analogies when helpful
- Balance technical depth with clarity

For coding questions:
- Start with clarifying questions
- Discuss the approach before implementation
- Consider edge cases
- Analyze time and space complexity
- Suggest optimizations
- Discuss testing strategies

For system design questions:
- Gather requirements
- Define system constraints
- Break down into components
- Address scalability
- Consider trade-offs
- Discuss monitoring and maintenance

Keep responses technically accurate, practical, and focused on demonstrating both knowledge and problem-solving ability.

If the question was transcribed from speech and could reasonably mean several different things, reply with a single line of the form "CLARIFY: <interpretation 1> | <interpretation 2> | <interpretation 3>" and nothing else.

IMPORTANT: Always provide complete, technically sound responses. Include code examples when relevant, using proper formatting and commenting."""


class SecurePromptManager:
    """
    Builds gateway prompts from fixed text and sanitized interview context.

    Context fields are optional: each non-empty field is rendered through its own
    template, empty ones are left out of the prompt entirely.
    """

    def __init__(self):
        self._templates = self._initialize_templates()

    def _initialize_templates(self) -> Dict[str, PromptTemplate]:
        """Initialize secure prompt templates with explicit placeholders."""
        short_field = {"max_length": 200, "escape_html": False}
        return {
            "resume": PromptTemplate(
                template=(
                    "\n\nCandidate's Resume:\n{resume_text}"
                    "\n\nUse the above resume information to provide highly personalized responses "
                    "that align with the candidate's technical experience and skills."
                ),
                placeholders={"resume_text": "Resume pasted by the candidate"},
                sanitization_config={"resume_text": {"max_length": 8000, "escape_html": False}}
            ),
            "role": PromptTemplate(
                template="\n- Role: {role}",
                placeholders={"role": "Role the candidate is interviewing for"},
                sanitization_config={"role": short_field}
            ),
            "domain": PromptTemplate(
                template="\n- Domain: {domain}",
                placeholders={"domain": "Knowledge domain"},
                sanitization_config={"domain": short_field}
            ),
            "interview_type": PromptTemplate(
                template="\n- Interview Type: {interview_type}",
                placeholders={"interview_type": "Interview type"},
                sanitization_config={"interview_type": short_field}
            ),
        }

    def _render_optional(self, name: str, value: Optional[str]) -> str:
        """Render a context template, or return "" when the value is blank or unusable."""
        if not value or not value.strip():
            return ""
        try:
            return self._templates[name].render(**{next(iter(self._templates[name].placeholders)): value})
        except ValueError as e:
            logger.warning(f"Skipping interview context field '{name}': {e}")
            return ""

    def get_context_block(self, interview_context: Optional[InterviewContext]) -> str:
        """Render the "Context for this interview" section, or "" without context."""
        if interview_context is None:
            return ""
        block = "\n\nContext for this interview:"
        block += self._render_optional("resume", interview_context.resume_text)
        block += self._render_optional("role", interview_context.role)
        block += self._render_optional("domain", interview_context.domain)
        block += self._render_optional("interview_type", interview_context.interview_type)
        block += "\n\nTailor your responses to be specifically relevant for this technical context."
        return block

    def get_system_prompt(self, interview_context: Optional[InterviewContext] = None) -> str:
        """
        Generate the system prompt for the assistant.

        Args:
            interview_context (Optional[InterviewContext]): Context captured by the setup form.

        Returns:
            str: Base instructions, the optional context block and the response guidelines.
        """
        return f"{BASE_PROMPT}{self.get_context_block(interview_context)}\n\n{RESPONSE_GUIDELINES}"

    def build_messages(
        self,
        question: str,
        context: Sequence[ChatTurn],
        interview_context: Optional[InterviewContext] = None,
    ) -> List[Dict[str, str]]:
        """
        Build the chat-completion message list for a question.

        Args:
            question (str): The interview question to answer.
            context (Sequence[ChatTurn]): Earlier turns; only the trailing CONTEXT_WINDOW are sent.
            interview_context (Optional[InterviewContext]): Context for the system prompt.

        Returns:
            List[Dict[str, str]]: System prompt, recent turns, then the question as a user turn.
        """
        recent = list(context)[-CONTEXT_WINDOW:] if CONTEXT_WINDOW else []
        messages = [{"role": "system", "content": self.get_system_prompt(interview_context)}]
        messages.extend({"role": turn.role, "content": turn.content} for turn in recent)
        messages.append({"role": "user", "content": question})
        return messages


def parse_clarification(response: str) -> Optional[List[str]]:
    """Return the options of a "CLARIFY:" response, or None for a regular answer."""
    if not response.startswith(CLARIFY_PREFIX):
        return None
    options = [option.strip() for option in response[len(CLARIFY_PREFIX):].split("|")]
    return [option for option in options if option]


secure_prompt_manager = SecurePromptManager()
