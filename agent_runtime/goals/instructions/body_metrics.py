"""Height, weight and body composition instructions."""

from agent_runtime.goals.instructions.base import GoalInstruction, GoalInstructionContext


def get_body_metrics_instruction(context: GoalInstructionContext) -> GoalInstruction:
    needs_height = context.needs("height") and not context.has("height")
    needs_weight = context.needs("weight") and not context.has("weight")
    needs_body_fat = context.needs("bodyFatPercentage") and not context.has("bodyFatPercentage")

    if needs_height and needs_weight:
        return GoalInstruction(
            instruction=(
                "Ask for their height and weight together in a casual, non-judgmental way.\n"
                "This helps you understand their starting point. Keep it light and supportive."
            ),
            examples=[
                "\"Quick question - what's your height and weight right now? "
                "Just so I know where you're starting from!\"",
                "\"To customize your program, what's your current height and weight?\"",
            ],
            target_fields=["height", "weight"],
        )

    if needs_height:
        return GoalInstruction(
            instruction="Ask for their height. Keep it casual.",
            examples=['"And how tall are you?"'],
            target_fields=["height"],
        )

    if needs_weight:
        return GoalInstruction(
            instruction="Ask for their weight. Keep it casual and non-judgmental.",
            examples=["\"And what's your current weight?\""],
            target_fields=["weight"],
        )

    if context.has("height") and context.has("weight") and needs_body_fat:
        return GoalInstruction(
            instruction=(
                "Optionally ask if they know their body fat percentage. "
                "Don't push if they don't know."
            ),
            examples=['"Do you happen to know your body fat percentage? No worries if not!"'],
            target_fields=["bodyFatPercentage"],
        )

    return GoalInstruction(instruction="Body metrics captured. No question needed.")
