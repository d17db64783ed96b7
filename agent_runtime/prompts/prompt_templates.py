"""Dynamic prompt construction for each model call of a turn."""

from datetime import date, datetime
from typing import Any, Optional

from agent_runtime.conversation.date_normalizer import build_date_normalization_prompt
from agent_runtime.conversation.pronouns import to_instruction_voice
from agent_runtime.conversation.verbosity import system_prompt_rule
from agent_runtime.goals.instructions import GoalInstruction
from agent_runtime.prompts.system_prompts import (
    CHARACTER_ROLEPLAY_FRAME,
    FOLLOW_UP_QUESTION_RULES,
    GENDER_NEUTRAL_REMINDER,
    INTENT_DETECTION_INSTRUCTIONS,
    anti_fabrication_rules,
    gender_block,
)
from agent_runtime.schemas.channel_schema import Message
from agent_runtime.schemas.goal_schema import GoalDefinition
from agent_runtime.schemas.intent_schema import CompanyInfoCategory, WorkflowField
from agent_runtime.schemas.persona_schema import WEEKDAYS, AgentPersona, CompanyInfo
from agent_runtime.utils import has_actual_value, unwrap_value

COMPANY_NAME_PLACEHOLDER = "{{companyName}}"


def format_history(messages: list[Message], user_label: str = "Human", agent_label: str = "AI") -> str:
    return "\n".join(
        f"{user_label if m.is_user else agent_label}: {m.content}" for m in messages
    )


def _company_info_available(company: Optional[CompanyInfo]) -> str:
    if company is None:
        return "No company info available"
    entries = [
        (company.name, f"- Company Name: {company.name}"),
        (company.business_hours, "- Business Hours"),
        (company.phone, "- Phone Number"),
        (company.email, "- Email Address"),
        (company.website, "- Website"),
        (company.address, "- Address"),
        (company.services, "- Services Offered"),
        (company.products, "- Products"),
        (company.pricing, "- Pricing & Plans"),
        (company.promotions, "- Current Promotions"),
    ]
    return "\n".join(line for present, line in entries if present) or "No company info available"


def build_intent_detection_prompt(
    user_message: str,
    recent_messages: list[Message],
    active_goals: list[GoalDefinition],
    completed_goals: list[str],
    captured_data: dict[str, Any],
    company: Optional[CompanyInfo] = None,
    business_context: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """Stage 1 prompt. Goals list only the fields not yet captured so nothing is re-asked."""
    goal_lines = []
    for goal in active_goals:
        still_needed = [f for f in goal.field_names if not has_actual_value(captured_data.get(f))]
        if still_needed:
            fields_info = f" -> CURRENTLY ASKING FOR: {', '.join(still_needed)}"
        else:
            fields_info = " -> All fields captured"
        goal_lines.append(f"- {goal.name or goal.id}: {goal.prompt_text}{fields_info}")

    captured_lines = [
        f"- {name}: {unwrap_value(value)}"
        for name, value in captured_data.items()
        if has_actual_value(value)
    ]

    instructions = INTENT_DETECTION_INSTRUCTIONS.format(
        fields=", ".join(f.value for f in WorkflowField),
        categories=", ".join(f'"{c.value}"' for c in CompanyInfoCategory),
        date_rules=build_date_normalization_prompt(business_context, today=today),
    )

    return f"""You are an expert assistant analyzing a user's message to determine their intent.

CURRENT USER MESSAGE: "{user_message}"

RECENT CONVERSATION HISTORY (last {len(recent_messages)} messages):
{format_history(recent_messages)}

ACTIVE WORKFLOW GOALS (data we're trying to collect):
{chr(10).join(goal_lines) or 'None'}

COMPLETED GOALS (do NOT ask for this data again):
{', '.join(completed_goals) or 'None'}

ALREADY CAPTURED DATA (do NOT extract these fields again):
{chr(10).join(captured_lines) or 'None'}

COMPANY INFORMATION AVAILABLE:
{_company_info_available(company)}

{instructions}"""


def _pricing_section(company: CompanyInfo) -> list[str]:
    pricing = company.pricing
    if not pricing or not pricing.plans:
        return []
    lines = ["", "PRICING & MEMBERSHIP PLANS:"]
    for plan in pricing.plans:
        star = "* " if plan.popular else ""
        lines.append(f"  {star}{plan.name} - {plan.price}")
        if plan.description:
            lines.append(f"  {plan.description}")
        if plan.features:
            lines.append("  Features:")
            lines.extend(f"    - {feature}" for feature in plan.features)
    if pricing.custom_pricing_available:
        lines.append("  Custom pricing available for corporate groups and families")
    return lines


def _promotions_section(company: CompanyInfo, now: Optional[datetime]) -> list[str]:
    active = [p for p in company.promotions if p.is_active(now)]
    if not active:
        return []
    lines = ["", "CURRENT PROMOTIONS:"]
    for promo in active:
        lines.append(f"  {promo.title}")
        if promo.urgency_message:
            lines.append(f"  {promo.urgency_message}")
        lines.append(f"  {promo.description}")
        lines.append(f"  Valid until: {promo.valid_until.date().isoformat()}")
        if promo.conditions:
            lines.append("  Conditions:")
            lines.extend(f"    - {condition}" for condition in promo.conditions)
    return lines


def _hours_section(company: CompanyInfo) -> list[str]:
    if not company.business_hours:
        return []
    lines = ["", "BUSINESS HOURS:"]
    for day in WEEKDAYS:
        slots = company.hours_for(day)
        if slots:
            lines.append(f"  {day.capitalize()}: {', '.join(f'{s.from_} - {s.to}' for s in slots)}")
    return lines


def _location_section(company: CompanyInfo) -> list[str]:
    address = company.address
    if not address:
        return []
    return [
        "",
        "LOCATION:",
        f"  {address.street or ''}",
        f"  {address.city or ''}, {address.state or ''} {address.zip_code or ''}",
    ]


def _services_section(company: CompanyInfo) -> list[str]:
    if not company.services:
        return []
    return ["", "SERVICES OFFERED:"] + [f"  - {service}" for service in company.services]


def build_company_info_block(
    company: Optional[CompanyInfo],
    categories: list[str],
    now: Optional[datetime] = None,
) -> str:
    """Company details limited to the categories the user asked about."""
    if not categories:
        return ""
    lines = ["", "", "COMPANY INFORMATION TO REFERENCE:"]
    if company is not None:
        rendered: set[str] = set()
        for category in categories:
            if category in ("pricing", "plans") and "pricing" not in rendered:
                lines += _pricing_section(company)
                rendered.add("pricing")
            elif category == "promotions" and category not in rendered:
                lines += _promotions_section(company, now)
                rendered.add(category)
            elif category == "hours" and category not in rendered:
                lines += _hours_section(company)
                rendered.add(category)
            elif category in ("location", "address") and "location" not in rendered:
                lines += _location_section(company)
                rendered.add("location")
            elif category == "services" and category not in rendered:
                lines += _services_section(company)
                rendered.add(category)
    lines += ["", "CRITICAL: Use ONLY the information above. Do NOT make up details, prices, or dates.", "", ""]
    return "\n".join(lines)


def build_acknowledgment_block(extracted: dict[str, Any]) -> str:
    if not extracted:
        return ""
    lines = ["", "USER JUST PROVIDED:"]
    lines += [f"- {name}: {unwrap_value(value)}" for name, value in extracted.items()]
    lines += ["", "Acknowledge this enthusiastically and naturally in your response.", "", ""]
    return "\n".join(lines)


def build_conversational_system_prompt(
    persona: AgentPersona,
    company: Optional[CompanyInfo],
    extracted: dict[str, Any],
    gender: Optional[str],
    first_name: Optional[str],
    requested_categories: list[str],
    now: Optional[datetime] = None,
) -> str:
    """Stage 2 system prompt: acknowledgment, persona voice, gender rule, company info, rules."""
    persona_prompt = to_instruction_voice(persona.system_prompt)
    prompt = (
        build_acknowledgment_block(extracted)
        + persona_prompt
        + system_prompt_rule(persona.verbosity)
        + gender_block(gender, first_name)
        + build_company_info_block(company, requested_categories, now)
    )
    if company and company.name:
        prompt = prompt.replace(COMPANY_NAME_PLACEHOLDER, company.name)
    return prompt + anti_fabrication_rules(company)


def build_reply_prompt(
    persona_name: str,
    company_name: str,
    system_prompt: str,
    history: list[Message],
    user_message: str,
) -> str:
    frame = CHARACTER_ROLEPLAY_FRAME.format(persona_name=persona_name, company_name=company_name)
    return (
        f"{frame}{system_prompt}\n\nConversation history:\n{format_history(history)}"
        f"\n\nHuman: {user_message}\n\nAI:"
    )


def build_verification_prompt(
    identity: str,
    persona: AgentPersona,
    company_name: str,
    gender_line: str,
    field_label: str,
    field_value: Any,
    verification_type: str,
) -> str:
    role = persona.role or "team member"
    return f"""{identity}You are {persona.name}, a {role} at {company_name}.
{gender_line}

The user just provided their {field_label}: {field_value}

YOUR TASK:
Generate a brief acknowledgment (1 sentence only) that:
- Thanks them or acknowledges receipt
- Mentions we're sending a {verification_type}
- Stays in character as {persona.name}
- Uses appropriate gendered language (see GENDER rule above)

CRITICAL RULES:
- EXACTLY 1 sentence
- NO additional instructions
- NO "check spam" or extra details

ACKNOWLEDGMENT:"""


def build_error_recovery_prompt(
    identity: str,
    persona: AgentPersona,
    company_name: str,
    gender_line: str,
    field_type: str,
    previous_value: Any,
) -> str:
    issue = "verification text" if field_type == "phone" else "verification email"
    return f"""{identity}You are {persona.name} at {company_name}.
{gender_line}

USER ISSUE: The user said they didn't receive the {issue}.
PREVIOUSLY PROVIDED {field_type.upper()}: {previous_value}

YOUR TASK:
Generate a short, apologetic message that:
1. Acknowledges the issue
2. Asks them to double-check and provide the correct {field_type}
3. Repeats back what you had on file for verification
4. Stays in character as {persona.name}

EXAMPLE:
"Oh damn, my bad! Let me double-check that {field_type}. I have {previous_value} on file. Is that right, or did I mess up?"

Keep it conversational and brief (2-3 sentences max)."""


def build_exit_prompt(
    identity: str,
    persona: AgentPersona,
    company_name: str,
    gender_line: str,
    full_name: str,
    goal_achieved: bool,
    appointment: str = "",
    missing_fields: str = "",
    first_name: Optional[str] = None,
) -> str:
    header = f"""{identity}You are {persona.name} at {company_name}.
{gender_line}

{to_instruction_voice(persona.system_prompt)}
"""
    if goal_achieved:
        return header + f"""
The user is ending the conversation. The PRIMARY GOAL has been ACHIEVED!

USER INFO:
- Name: {full_name}
- Appointment: {appointment}

YOUR TASK:
Generate a warm, enthusiastic farewell that:
1. Thanks them and confirms their appointment details
2. Expresses excitement about seeing them
3. Stays 100% in character as {persona.name}
4. Mentions the company name: {company_name}

CRITICAL RULES:
- Keep it brief (2-3 sentences max)
- Include their name and appointment time
- Be warm and excited, not robotic

FAREWELL:"""
    return header + f"""
The user is ending the conversation, but we haven't finished what we need yet!

USER INFO:
- Name: {full_name}
- Missing to book: {missing_fields}

YOUR TASK:
Generate a GENTLE last-chance offer that:
1. Acknowledges they're leaving (don't be pushy!)
2. Makes ONE quick offer to lock in their appointment
3. Mentions what we need (just {missing_fields})
4. Stays 100% in character as {persona.name}

CRITICAL RULES:
- Keep it brief (2-3 sentences max)
- Be friendly, NOT desperate or pushy
- Give them an easy out ("No worries if not!")

EXAMPLE TONE:
"No worries, {first_name or 'friend'}! Before you go - want me to lock in that spot for you? No pressure though!"

LAST CHANCE:"""


def build_engagement_prompt(
    identity: str,
    persona: AgentPersona,
    company_name: str,
    gender_line: str,
    recent_messages: list[Message],
) -> str:
    context = format_history(recent_messages, "User", "You") if recent_messages else "No context"
    return f"""{identity}YOU ARE: {persona.name}
{gender_line}

{to_instruction_voice(persona.system_prompt)}

RECENT CONVERSATION:
{context}

CONTEXT: This is the user's FIRST message. You just gave them a warm welcome.

YOUR TASK: Ask ONE follow-up question to move the conversation forward and learn more about them.

WHAT TO ASK:
- What brings them to {company_name}?
- What are they hoping to achieve?
- Keep it natural, conversational, and in YOUR voice
- Don't ask for their name yet (let that happen naturally)

CRITICAL RULES:
- Stay 100% IN CHARACTER with your personality and tone
{GENDER_NEUTRAL_REMINDER}
- ONE question only
- Be brief (1-2 sentences max)

QUESTION:"""


def build_goal_question_prompt(
    identity: str,
    persona: AgentPersona,
    gender_line: str,
    instruction: GoalInstruction,
    still_needed: list[str],
    user_name: str,
    recent_messages: list[Message],
) -> str:
    examples = ""
    if instruction.examples:
        examples = "\nEXAMPLES:\n" + "\n".join(f"- {e}" for e in instruction.examples)
    target_fields = " and ".join(instruction.target_fields) or (still_needed[0] if still_needed else "")
    context = (
        format_history(recent_messages, "User", "You") if recent_messages else "No recent context"
    )
    rules = FOLLOW_UP_QUESTION_RULES.format(target_fields=target_fields, user_name=user_name)
    return f"""{identity}You are {persona.name}. Generate a SHORT follow-up question.

{gender_line}

RECENT CONVERSATION:
{context}

GOAL: {instruction.instruction}
{examples}

{rules}

YOUR QUESTION:"""
