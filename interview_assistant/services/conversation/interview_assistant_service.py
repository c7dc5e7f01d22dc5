"""
Interview Assistant Service Module

This module runs one question/answer turn of the assistant for a session:
- Records the question in the session history (and the message log)
- Builds the chat context from the earlier turns
- Streams a suggested answer from the gateway, passing tokens to the caller
- Classifies the outcome as an answer, a clarification request or an error

Answers are stored in the session; clarification prompts and errors are only returned
so the browser can show them.

Dependencies:
- loguru: For logging turn outcomes.
- interview_assistant.services.ai_response.ai_response_service: For answer generation.
- interview_assistant.services.conversation.conversation_store: For session state.
- interview_assistant.services.database.message_logger: For the optional message log.
- interview_assistant.core.secure_prompt_manager: For parsing clarification responses.
"""

from typing import Callable, Optional

from loguru import logger

from interview_assistant.core.secure_prompt_manager import parse_clarification
from interview_assistant.errors.exceptions import AnswerInProgress, BadRequest
from interview_assistant.schemas.main.assistant_turn import AssistantTurnResult
from interview_assistant.schemas.main.conversation_state import ConversationState
from interview_assistant.services.ai_response.ai_response_service import AIResponseService, TokenCallback
from interview_assistant.services.conversation.conversation_store import ConversationStore, conversation_store
from interview_assistant.services.database.message_logger import MessageLogger, message_logger

CLARIFICATION_PROMPT = "I need to clarify your question. Please select one of the options:"


class InterviewAssistantService:
    """
    Orchestrates assistant turns on top of the conversation store and the AI service.

    At most one answer is generated per session at a time; a second question while one
    is in flight is rejected with AnswerInProgress.

    Example Usage:
        service = InterviewAssistantService()
        session_id = service.store.create_session(InterviewContext(role="SRE"))
        result = await service.handle_question(session_id, "How does TCP slow start work?")
        if result.kind == "clarify":
            result = await service.handle_clarification(session_id, result.options[0])
    """

    def __init__(
        self,
        store: Optional[ConversationStore] = None,
        ai_service_factory: Optional[Callable[[], AIResponseService]] = None,
        logger_service: Optional[MessageLogger] = None,
    ):
        self.store = store or conversation_store
        self._ai_service_factory = ai_service_factory or AIResponseService
        self._message_logger = logger_service or message_logger

    def _ai_service_for(self, state: ConversationState) -> AIResponseService:
        service = self._ai_service_factory()
        service.set_interview_context(state.interview_context)
        return service

    def _record(self, session_id: str, state: ConversationState, message_type: str, text: str):
        message = state.add_message(message_type, text)
        self._message_logger.schedule(session_id, message)
        return message

    async def handle_question(self, session_id: str, text: str, on_token: Optional[TokenCallback] = None) -> AssistantTurnResult:
        """
        Answer a new interview question.

        Args:
            session_id (str): The session the question belongs to.
            text (str): The question, typed or transcribed.
            on_token (Optional[TokenCallback]): Receives answer tokens as they stream in.

        Returns:
            AssistantTurnResult: The stored answer, a clarification request or an error.

        Raises:
            BadRequest: If the question is empty.
            SessionNotFound: If the session does not exist.
            AnswerInProgress: If an answer is already being generated for the session.
        """
        question = (text or "").strip()
        if not question:
            raise BadRequest("Question cannot be empty")

        state = self.store.get_session(session_id)
        if state.is_generating:
            raise AnswerInProgress(session_id)

        # Context is the conversation before this question; the question is sent separately.
        context = state.to_chat_context()
        self._record(session_id, state, "question", question)
        return await self._generate(session_id, state, question, context, on_token, allow_clarification=True)

    async def handle_clarification(self, session_id: str, option: str, on_token: Optional[TokenCallback] = None) -> AssistantTurnResult:
        """Answer the interpretation the user picked after a clarification request."""
        selected = (option or "").strip()
        if not selected:
            raise BadRequest("Clarification option cannot be empty")

        state = self.store.get_session(session_id)
        if state.is_generating:
            raise AnswerInProgress(session_id)

        context = state.to_chat_context()
        return await self._generate(session_id, state, selected, context, on_token, allow_clarification=False)

    async def _generate(self, session_id, state, question, context, on_token, allow_clarification) -> AssistantTurnResult:
        state.is_generating = True
        try:
            generated = await self._ai_service_for(state).generate(question, context, on_token)
        finally:
            state.is_generating = False

        response = generated.text
        if generated.failed:
            logger.warning(f"[Session {session_id}] Answer generation failed: {response}")
            return AssistantTurnResult(kind="error", text=response)

        if allow_clarification:
            options = parse_clarification(response)
            if options is not None:
                logger.info(f"[Session {session_id}] Clarification requested with {len(options)} options")
                return AssistantTurnResult(kind="clarify", text=CLARIFICATION_PROMPT, options=options)

        message = self._record(session_id, state, "answer", response)
        logger.info(f"[Session {session_id}] Answer stored ({len(response)} chars)")
        return AssistantTurnResult(kind="answer", text=response, message=message)


interview_assistant_service = InterviewAssistantService()
