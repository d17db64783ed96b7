"""
Fallback instructions for goals without a dedicated generator.

Several missing fields are asked for together in one natural question.
A single missing field gets a targeted ask, and ``primaryGoal`` reuses
whatever motivation or timeline the user already shared.
"""

from agent_runtime.goals.instructions.base import GoalInstruction, GoalInstructionContext
from agent_runtime.utils import humanize_field_name, join_naturally

# Extracted alongside motivationReason, never asked for directly.
AUTO_EXTRACTED_FIELDS = ("motivationCategories",)


def _primary_goal_instruction(context: GoalInstructionContext) -> GoalInstruction:
    motivation = context.captured("motivationReason")
    timeline = context.captured("timeline")

    if motivation and timeline:
        return GoalInstruction(
            instruction=(
                "Ask what specific goal they want to achieve.\n"
                f'Reference what they already told you (motivation: "{motivation}", '
                f'timeline: "{timeline}") to show you were listening.\n'
                "Ask what SPECIFIC result they're looking for "
                "(e.g., lose weight, build muscle, get stronger)."
            ),
            examples=[
                f'"Love that {motivation} motivation! By {timeline}, what specific result '
                'are you going for - weight loss, muscle gain, toning up?"',
                f'"So for this {motivation} deadline, what\'s THE goal - dropping pounds, '
                'building strength, or something else?"',
                f'"Got it - {timeline} is the target. What exactly do you want to achieve by then?"',
            ],
            target_fields=["primaryGoal"],
        )
    if motivation:
        return GoalInstruction(
            instruction=(
                "Ask what specific goal they want to achieve, "
                f'referencing their motivation ("{motivation}").'
            ),
            examples=[
                f'"For this {motivation}, what\'s the main goal - weight loss, muscle, toning?"',
                f'"What specific result are you going for with the {motivation}?"',
            ],
            target_fields=["primaryGoal"],
        )
    if timeline:
        return GoalInstruction(
            instruction=(
                f'Ask what specific goal they want to achieve by their timeline ("{timeline}").'
            ),
            examples=[
                f'"By {timeline}, what are you looking to accomplish?"',
                f'"What do you want to achieve by {timeline}?"',
            ],
            target_fields=["primaryGoal"],
        )
    return GoalInstruction(
        instruction="Ask what their main fitness goal is.",
        examples=[
            "\"What's your main goal?\"",
            '"What are you looking to achieve?"',
            '"What brings you in today?"',
        ],
        target_fields=["primaryGoal"],
    )


def get_default_instruction(context: GoalInstructionContext) -> GoalInstruction:
    still_needed = [f for f in context.still_needed if f not in AUTO_EXTRACTED_FIELDS]

    if not still_needed:
        return GoalInstruction(
            instruction=f'All fields for "{context.goal_name}" are captured. No question needed.',
        )

    if len(still_needed) > 1:
        labels = join_naturally([humanize_field_name(f) for f in still_needed])
        return GoalInstruction(
            instruction=(
                f"Ask about their {labels} in a natural, conversational way.\n"
                "Don't make it feel like a form - keep it casual and friendly.\n"
                "DO NOT use the field names literally - use natural language!"
            ),
            examples=[
                '"So tell me - what are you hoping to achieve? What\'s driving you, '
                'and when do you want to hit your target?"',
                '"What brings you in today? What are you looking to accomplish and by when?"',
            ],
            target_fields=still_needed,
        )

    field_name = still_needed[0]
    if field_name == "motivationReason":
        return GoalInstruction(
            instruction="Ask what's driving/motivating them. Keep it casual.",
            examples=[
                "\"What's driving this change for you?\"",
                '"What made you decide now is the time?"',
            ],
            target_fields=[field_name],
        )
    if field_name == "timeline":
        return GoalInstruction(
            instruction="Ask about their timeline/when they want to achieve their goal.",
            examples=[
                '"When are you looking to hit this goal?"',
                "\"What's your timeline for this?\"",
            ],
            target_fields=[field_name],
        )
    if field_name == "primaryGoal":
        return _primary_goal_instruction(context)

    label = humanize_field_name(field_name)
    return GoalInstruction(
        instruction=f"Ask for their {label}.",
        examples=[f"\"What's your {label}?\"", f'"Tell me about your {label}!"'],
        target_fields=[field_name],
    )
