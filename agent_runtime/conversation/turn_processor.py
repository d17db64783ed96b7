"""
Three-stage processing of one inbound chat message.

Stage 1 detects intent and extracts data (pattern matches first, then the
intent model). Stage 2 writes the in-character reply. Stage 3 picks and
generates a follow-up: farewell, correction recovery, verification, goal
question or engagement question.

Every stage degrades to a fallback instead of raising, so ``process``
always returns a ProcessingResult.

Usage:
    processor = TurnProcessor(model=OpenAIChatModel(), persona=persona, company_info=company)
    result = await processor.process(TurnContext(user_message="Hi!", channel_id="ch-1"))
    print(result.response, result.follow_up_question)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from agent_runtime.config import AppConfig, settings
from agent_runtime.conversation.action_tags import ActionTagProcessor
from agent_runtime.conversation.followup_policy import (
    FollowUpKind,
    FollowUpSituation,
    select_follow_up,
)
from agent_runtime.conversation.pre_extraction import (
    MOTIVATION_REASON_FIELD,
    TIME_FIELD,
    apply_patterns,
    merge_intent_extractions,
    seed_from_goal_result,
)
from agent_runtime.conversation.verbosity import get_profile, truncate_text
from agent_runtime.goals.config_resolver import find_goals, most_urgent, required_fields
from agent_runtime.goals.instructions import (
    GoalInstructionContext,
    InstructionGenerator,
    get_goal_instruction,
)
from agent_runtime.goals.instructions.default import get_default_instruction
from agent_runtime.logging_context import get_channel_logger, set_channel_id
from agent_runtime.prompts import prompt_templates
from agent_runtime.prompts.system_prompts import company_name, gender_rule, identity_enforcement
from agent_runtime.providers.base import ChatModel, ModelResponse
from agent_runtime.schemas.channel_schema import (
    ChannelState,
    ExtractedValue,
    GoalOrchestrationResult,
    Message,
    captured_field_names,
    merge_captured_data,
)
from agent_runtime.schemas.goal_schema import EffectiveGoalConfig, GoalDefinition
from agent_runtime.schemas.intent_schema import IntentDetectionResult
from agent_runtime.schemas.persona_schema import AgentPersona, CompanyInfo
from agent_runtime.schemas.turn_schema import ProcessingResult, TurnContext
from agent_runtime.telemetry.publisher import (
    LLMUsageEvent,
    LoggingTelemetryPublisher,
    PresenceEvent,
    RequestType,
    TelemetryPublisher,
    estimate_cost,
    safe_publish,
    safe_publish_usage,
)
from agent_runtime.utils import has_actual_value, humanize_field_name, is_valid_email, join_naturally, unwrap_value

logger = get_channel_logger(__name__)

PostProcessor = Callable[[str], str]

CONTACT_GOAL_MARKER = "contact_info"
MAX_EXIT_MISSING_FIELDS = 3
VERIFICATION_MAX_SENTENCES = 1


@dataclass
class TurnState:
    """Working values shared by the stages of one turn."""
    context: TurnContext
    extracted: dict[str, ExtractedValue] = field(default_factory=dict)
    intent: Optional[IntentDetectionResult] = None
    gender: Optional[str] = None
    first_name: Optional[str] = None

    @property
    def channel_state(self) -> ChannelState:
        return self.context.channel_state or ChannelState(channel_id=self.context.channel_id)

    @property
    def persisted(self) -> dict[str, Any]:
        return self.channel_state.captured_data

    @property
    def captured(self) -> dict[str, Any]:
        """Persisted captured data with this turn's extraction merged on top."""
        return merge_captured_data(self.persisted, self.extracted)

    @property
    def active_goals(self) -> list[str]:
        goal_result = self.context.goal_result
        if goal_result and goal_result.active_goals:
            return list(goal_result.active_goals)
        return list(self.channel_state.active_goals)

    @property
    def completed_goals(self) -> list[str]:
        goal_result = self.context.goal_result
        if goal_result and goal_result.completed_goals:
            return list(goal_result.completed_goals)
        return list(self.channel_state.completed_goals)


class TurnProcessor:
    """Runs intent detection, reply generation and follow-up generation for a turn."""

    def __init__(
        self,
        model: ChatModel,
        persona: AgentPersona,
        company_info: Optional[CompanyInfo] = None,
        post_processor: Optional[PostProcessor] = None,
        telemetry: Optional[TelemetryPublisher] = None,
        instruction_generator: Optional[InstructionGenerator] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.model = model
        self.persona = persona
        self.company_info = company_info
        self.post_processor = post_processor or ActionTagProcessor()
        self.telemetry = telemetry or LoggingTelemetryPublisher()
        self.instruction_generator = instruction_generator or get_goal_instruction
        self.config = config or settings

    @property
    def company_name(self) -> str:
        return company_name(self.company_info)

    async def process(self, context: TurnContext) -> ProcessingResult:
        if context.channel_id:
            set_channel_id(context.channel_id)
        turn = TurnState(context=context)
        logger.info("Processing turn: %r", context.user_message[:80])

        turn.extracted = self.pre_extract(turn)
        turn.intent = await self.detect_intent(turn)
        await self._publish_presence(PresenceEvent.READ, context)

        merge_intent_extractions(turn.extracted, turn.intent, context.user_message)
        if turn.extracted:
            logger.info("Extracted this turn: %s", ", ".join(turn.extracted))
        await self._notify_data_extracted(turn)
        turn.gender, turn.first_name = self._resolve_identity(turn)

        response = await self.generate_reply(turn)
        await self._publish_presence(PresenceEvent.TYPING, context)

        follow_up = await self.generate_follow_up(turn)

        return ProcessingResult(
            response=response,
            follow_up_question=follow_up,
            intent_detection_result=turn.intent,
            pre_extracted_data=turn.extracted,
        )

    # Stage 1

    def pre_extract(self, turn: TurnState) -> dict[str, ExtractedValue]:
        """Seed orchestrator values, then layer time and motivation pattern matches."""
        context = turn.context
        data: dict[str, ExtractedValue] = {}
        if context.goal_result:
            data = seed_from_goal_result(context.goal_result.extracted_info)

        captured = merge_captured_data(turn.persisted, data)
        asking_for_time = any(
            TIME_FIELD in required_fields(goal) and not has_actual_value(captured.get(TIME_FIELD))
            for goal in find_goals(context.effective_goal_config, turn.active_goals)
        )
        motivation_known = has_actual_value(turn.persisted.get(MOTIVATION_REASON_FIELD))
        return apply_patterns(context.user_message, data, asking_for_time, motivation_known)

    async def detect_intent(self, turn: TurnState) -> IntentDetectionResult:
        """Structured intent detection. Any failure yields the neutral fallback."""
        context = turn.context
        conv = self.config.conversation
        active: list[GoalDefinition] = find_goals(context.effective_goal_config, turn.active_goals)
        prompt = prompt_templates.build_intent_detection_prompt(
            user_message=context.user_message,
            recent_messages=context.message_history[-conv.intent_history_messages:],
            active_goals=active,
            completed_goals=turn.completed_goals,
            captured_data=merge_captured_data(turn.persisted, turn.extracted),
            company=self.company_info,
            business_context=conv.business_context,
        )
        try:
            result = await self.model.invoke_structured(prompt, IntentDetectionResult)
        except Exception:
            logger.exception("Intent detection failed, using neutral fallback")
            return IntentDetectionResult.neutral_fallback()

        logger.info(
            "Intent: %s (deep context: %s, categories: %s)",
            result.primary_intent.value, result.requires_deep_context, result.requested_categories,
        )
        return result

    async def _notify_data_extracted(self, turn: TurnState) -> None:
        hook = turn.context.on_data_extracted
        if hook is None:
            return
        try:
            await hook(turn.extracted, turn.context.goal_result, turn.context.user_message)
        except Exception:
            logger.exception("on_data_extracted hook failed, continuing turn")

    def _resolve_identity(self, turn: TurnState) -> tuple[Optional[str], Optional[str]]:
        """Gender and first name from captured data only; names never imply gender."""
        goal_info = turn.context.goal_result.extracted_info if turn.context.goal_result else {}

        def _lookup(field_name: str) -> Optional[str]:
            for source in (turn.persisted, goal_info, turn.extracted):
                value = source.get(field_name)
                if has_actual_value(value):
                    return str(unwrap_value(value))
            return None

        return _lookup("gender"), _lookup("firstName")

    # Stage 2

    def _reply_history(self, turn: TurnState) -> list[Message]:
        context = turn.context
        history = list(context.message_history)
        if history and history[-1].is_user and history[-1].content == context.user_message:
            history = history[:-1]
        conv = self.config.conversation
        deep = bool(turn.intent and turn.intent.requires_deep_context)
        limit = conv.deep_context_history_messages if deep else conv.reply_history_messages
        logger.debug("Reply history: %d of %d messages (deep context: %s)", min(limit, len(history)), len(history), deep)
        return history[-limit:]

    async def generate_reply(self, turn: TurnState) -> str:
        context = turn.context
        categories = turn.intent.requested_categories if turn.intent else []
        system_prompt = prompt_templates.build_conversational_system_prompt(
            persona=self.persona,
            company=self.company_info,
            extracted=turn.extracted,
            gender=turn.gender,
            first_name=turn.first_name,
            requested_categories=categories,
        )
        prompt = prompt_templates.build_reply_prompt(
            persona_name=self.persona.name,
            company_name=self.company_name,
            system_prompt=system_prompt,
            history=self._reply_history(turn),
            user_message=context.user_message,
        )
        try:
            response = await self.model.invoke(prompt)
        except Exception:
            logger.exception("Reply generation failed, using fallback reply")
            return self.config.conversation.fallback_reply

        await self._emit_usage(response, RequestType.CONVERSATIONAL_RESPONSE, context)
        text = response.text.strip()
        try:
            return truncate_text(self.post_processor(text), get_profile(self.persona.verbosity).max_sentences)
        except Exception:
            logger.exception("Reply post-processing failed, keeping unprocessed reply")
            return text

    # Stage 3

    async def generate_follow_up(self, turn: TurnState) -> Optional[str]:
        situation = FollowUpSituation(
            primary_intent=turn.intent.primary_intent.value if turn.intent else None,
            active_goals=turn.active_goals,
            extracted=turn.extracted,
            message_count=turn.context.channel_state.message_count if turn.context.channel_state else None,
        )
        kind = select_follow_up(situation)
        logger.info("Follow-up: %s", kind.value)

        if kind == FollowUpKind.FAREWELL:
            return await self._exit_message(turn)
        if kind == FollowUpKind.ERROR_RECOVERY:
            return await self._error_recovery_message(turn)
        if kind == FollowUpKind.VERIFICATION:
            return await self._verification_with_next_goal(turn, situation)
        if kind == FollowUpKind.GOAL_QUESTION:
            return await self._goal_question(turn, situation.active_goals)
        if kind == FollowUpKind.ENGAGEMENT:
            return await self._engagement_question(turn)
        return None

    def _identity(self) -> str:
        return identity_enforcement(self.persona.name, self.company_name)

    def _gender_line(self, turn: TurnState) -> str:
        return gender_rule(turn.gender, turn.first_name)

    async def _generate(
        self,
        prompt: str,
        request_type: RequestType,
        context: TurnContext,
        temperature: float,
        max_tokens: int,
    ) -> str:
        response = await self.model.invoke(prompt, temperature=temperature, max_tokens=max_tokens)
        await self._emit_usage(response, request_type, context)
        return response.text.strip()

    async def _exit_message(self, turn: TurnState) -> str:
        """Warm farewell when the primary goal is done, else one gentle last offer."""
        goal_config: EffectiveGoalConfig = turn.context.effective_goal_config
        captured = turn.captured
        completed = turn.completed_goals

        primary = next((g for g in goal_config.goals if g.is_primary), None)
        all_complete = bool(goal_config.goals) and all(g.id in completed for g in goal_config.goals)
        achieved = primary.id in completed if primary else all_complete

        first_name = captured.get("firstName") or ""
        full_name = " ".join(str(n) for n in (first_name, captured.get("lastName")) if n) or "friend"
        gen = self.config.generation

        if achieved:
            appointment = " at ".join(
                str(unwrap_value(captured[f])) for f in ("preferredDate", "preferredTime")
                if has_actual_value(captured.get(f))
            )
            if has_actual_value(captured.get("normalizedDateTime")):
                normalized = unwrap_value(captured["normalizedDateTime"])
                appointment = f"{appointment} ({normalized})" if appointment else str(normalized)
            missing = ""
            fallback = f"Thanks so much, {full_name}! We can't wait to see you at {self.company_name}."
        else:
            missing = self._missing_for_primary(goal_config, primary, captured, completed)
            fallback = (
                f"No worries, {first_name or 'friend'}! Whenever you're ready, "
                f"just send me {missing} and you're all set."
            )
            appointment = ""

        prompt = prompt_templates.build_exit_prompt(
            identity=self._identity(),
            persona=self.persona,
            company_name=self.company_name,
            gender_line=self._gender_line(turn),
            full_name=full_name,
            goal_achieved=achieved,
            appointment=appointment,
            missing_fields=missing,
            first_name=first_name or None,
        )
        try:
            return await self._generate(
                prompt, RequestType.FOLLOW_UP_QUESTION, turn.context,
                gen.exit_temperature, gen.exit_max_tokens,
            )
        except Exception:
            logger.exception("Exit message generation failed")
            return fallback

    @staticmethod
    def _missing_for_primary(
        goal_config: EffectiveGoalConfig,
        primary: Optional[GoalDefinition],
        captured: dict[str, Any],
        completed: list[str],
    ) -> str:
        missing: list[str] = []
        if primary is not None:
            by_id = {g.id: g for g in goal_config.goals}
            for goal_id in primary.prerequisite_ids + [primary.id]:
                goal = by_id.get(goal_id)
                if goal is None or goal_id in completed:
                    continue
                missing += [f for f in required_fields(goal) if not has_actual_value(captured.get(f)) and f not in missing]
        if not missing:
            return "a few details"
        return ", ".join(missing[:MAX_EXIT_MISSING_FIELDS])

    async def _error_recovery_message(self, turn: TurnState) -> str:
        field_type = "phone" if turn.extracted.get("wrong_phone") else "email"
        correction = turn.extracted.get(f"wrong_{field_type}")
        previous = turn.channel_state.captured_value(field_type) or unwrap_value(correction)
        gen = self.config.generation

        prompt = prompt_templates.build_error_recovery_prompt(
            identity=self._identity(),
            persona=self.persona,
            company_name=self.company_name,
            gender_line=self._gender_line(turn),
            field_type=field_type,
            previous_value=previous,
        )
        try:
            return await self._generate(
                prompt, RequestType.ERROR_RECOVERY, turn.context,
                gen.error_recovery_temperature, gen.error_recovery_max_tokens,
            )
        except Exception:
            logger.exception("Error recovery generation failed")
            return f"Oh no, my bad! Let me double-check that {field_type}. I have {previous} on file - is that correct?"

    async def _verification_message(self, turn: TurnState) -> str:
        email = turn.extracted.get("email")
        if email is not None and is_valid_email(email):
            field_label, value, verification_type = "email", unwrap_value(email), "verification email"
        else:
            field_label = "phone number"
            value = unwrap_value(turn.extracted.get("phone"))
            verification_type = "verification text message"
        gen = self.config.generation

        prompt = prompt_templates.build_verification_prompt(
            identity=self._identity(),
            persona=self.persona,
            company_name=self.company_name,
            gender_line=self._gender_line(turn),
            field_label=field_label,
            field_value=value,
            verification_type=verification_type,
        )
        try:
            text = await self._generate(
                prompt, RequestType.VERIFICATION_MESSAGE, turn.context,
                gen.verification_temperature, gen.verification_max_tokens,
            )
        except Exception:
            logger.exception("Verification message generation failed")
            return f"Thanks! I'm sending a {verification_type} to {value} now."
        return truncate_text(text, VERIFICATION_MAX_SENTENCES)

    async def _verification_with_next_goal(self, turn: TurnState, situation: FollowUpSituation) -> str:
        """Verification, chained with a question for the next non-contact goal."""
        verification = await self._verification_message(turn)
        next_goals = [g for g in situation.active_goals if CONTACT_GOAL_MARKER not in g]
        if not next_goals:
            return verification

        logger.info("After contact capture, next goals: %s", ", ".join(next_goals))
        question = await self._goal_question(turn, next_goals)
        if question:
            return f"{verification}\n\n{question}"
        return verification

    async def _goal_question(self, turn: TurnState, active_goals: list[str]) -> Optional[str]:
        """Question for the most urgent goal's missing fields, or None when it is exhausted."""
        context = turn.context
        goal = most_urgent(active_goals, context.effective_goal_config)
        if goal is None:
            logger.info("No defined goal among active goals %s", active_goals)
            return None

        goal_result = context.goal_result or GoalOrchestrationResult(
            active_goals=active_goals,
            completed_goals=turn.channel_state.completed_goals,
        )
        attempts = goal_result.attempt_count(goal.id)
        max_attempts = goal.behavior.max_attempts or self.config.conversation.default_max_attempts
        if attempts >= max_attempts:
            logger.warning("Max attempts (%d) reached for goal %s", max_attempts, goal.id)
            return None

        already_captured = captured_field_names(turn.persisted, turn.extracted)
        still_needed = [f for f in required_fields(goal) if f not in already_captured]
        if not still_needed:
            logger.debug("Goal %s has every field captured", goal.id)
            return None

        # This turn's values win over persisted ones.
        captured_map = {
            f: turn.extracted[f] if has_actual_value(turn.extracted.get(f)) else turn.persisted.get(f)
            for f in already_captured
        }
        user_name = turn.first_name or "friend"
        instruction_context = GoalInstructionContext(
            goal_id=goal.id,
            goal_type=goal.type,
            goal_name=goal.name or "Goal",
            fields_needed=still_needed,
            fields_captured=captured_map,
            company_info=self.company_info,
            channel_state=context.channel_state,
            user_name=user_name,
            last_user_message=context.user_message,
            detected_intent=turn.intent.primary_intent.value if turn.intent else None,
        )
        try:
            instruction = self.instruction_generator(instruction_context)
        except Exception:
            logger.exception("Instruction generator failed for %s, using default instruction", goal.id)
            instruction = get_default_instruction(instruction_context)
        logger.debug("Goal %s instruction targets %s", goal.id, instruction.target_fields)

        gen = self.config.generation
        prompt = prompt_templates.build_goal_question_prompt(
            identity=self._identity(),
            persona=self.persona,
            gender_line=self._gender_line(turn),
            instruction=instruction,
            still_needed=still_needed,
            user_name=user_name,
            recent_messages=context.message_history[-self.config.conversation.question_context_messages:],
        )
        try:
            return await self._generate(
                prompt, RequestType.FOLLOW_UP_QUESTION, context,
                gen.goal_question_temperature, gen.goal_question_max_tokens,
            )
        except Exception:
            logger.exception("Goal question generation failed for %s", goal.id)
            fields = instruction.target_fields or still_needed[:2]
            return f"Could you share your {join_naturally([humanize_field_name(f) for f in fields])}?"

    async def _engagement_question(self, turn: TurnState) -> str:
        gen = self.config.generation
        prompt = prompt_templates.build_engagement_prompt(
            identity=self._identity(),
            persona=self.persona,
            company_name=self.company_name,
            gender_line=self._gender_line(turn),
            recent_messages=turn.context.message_history[-self.config.conversation.engagement_context_messages:],
        )
        try:
            return await self._generate(
                prompt, RequestType.ENGAGEMENT_QUESTION, turn.context,
                gen.engagement_temperature, gen.engagement_max_tokens,
            )
        except Exception:
            logger.exception("Engagement question generation failed")
            return f"What brings you to {self.company_name}?"

    # Telemetry

    async def _emit_usage(self, response: ModelResponse, request_type: RequestType, context: TurnContext) -> None:
        usage = response.usage_metadata
        if usage is None:
            logger.debug("No usage metadata for %s", request_type.value)
            return
        model_name = getattr(self.model, "model_name", None) or "unknown"
        event = LLMUsageEvent(
            tenant_id=context.tenant_id or "unknown",
            channel_id=context.channel_id,
            source=context.message_source or "unknown",
            request_type=request_type,
            model=model_name,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.total_tokens,
            estimated_cost_usd=estimate_cost(model_name, usage.input_tokens, usage.output_tokens),
        )
        await safe_publish_usage(self.telemetry, event)

    async def _publish_presence(self, event: PresenceEvent, context: TurnContext) -> None:
        if not self.config.telemetry.presence_events_enabled:
            return
        await safe_publish(self.telemetry, event.value, {
            "channelId": context.channel_id,
            "tenantId": context.tenant_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
