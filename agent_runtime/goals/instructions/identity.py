"""Name collection instructions (first and last name)."""

from agent_runtime.goals.instructions.base import GoalInstruction, GoalInstructionContext


def get_identity_instruction(context: GoalInstructionContext) -> GoalInstruction:
    needs_first = context.needs("firstName")
    needs_last = context.needs("lastName")
    has_first = context.has("firstName")
    has_last = context.has("lastName")
    first_name = context.captured("firstName") or ""

    if needs_first and needs_last and not has_first and not has_last:
        return GoalInstruction(
            instruction=(
                "Ask for their name. They can give first name only or full name - either works.\n"
                "Don't make it feel like a form. Keep it natural."
            ),
            examples=[
                "\"What's your name?\"",
                '"Who am I talking to?"',
                '"What should I call you?"',
            ],
            target_fields=["firstName", "lastName"],
        )

    if needs_last and not has_last and has_first:
        return GoalInstruction(
            instruction=(
                f"You have their first name ({first_name}). Now ask for their last name.\n"
                "Be casual about it - don't make it feel like paperwork."
            ),
            examples=[
                f'"And your last name, {first_name}?"',
                f'"Got it, {first_name}! Last name?"',
            ],
            target_fields=["lastName"],
        )

    if needs_first and not has_first and has_last:
        return GoalInstruction(
            instruction="You have their last name. Ask for their first name.",
            examples=['"And your first name?"', "\"What's your first name?\""],
            target_fields=["firstName"],
        )

    if needs_first and not needs_last and not has_first:
        return GoalInstruction(
            instruction="Ask for their first name only.",
            examples=["\"What's your first name?\"", '"What should I call you?"'],
            target_fields=["firstName"],
        )

    if needs_last and not needs_first and not has_last:
        return GoalInstruction(
            instruction="Ask for their last name.",
            examples=["\"What's your last name?\"", '"And your surname?"'],
            target_fields=["lastName"],
        )

    if has_first and has_last:
        return GoalInstruction(
            instruction=(
                f"Name is complete ({first_name} {context.captured('lastName')}). "
                "No question needed."
            ),
        )

    still_needed = context.still_needed
    return GoalInstruction(
        instruction=f"Ask for: {' and '.join(still_needed)}.",
        target_fields=still_needed,
    )
