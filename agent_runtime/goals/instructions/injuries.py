"""Injury and physical limitation instructions."""

from agent_runtime.goals.instructions.base import GoalInstruction, GoalInstructionContext


def get_injuries_instruction(context: GoalInstructionContext) -> GoalInstruction:
    if context.needs("physicalLimitations") and not context.has("physicalLimitations"):
        return GoalInstruction(
            instruction=(
                "Ask if they have any injuries, physical limitations, or health conditions "
                "we should know about.\n"
                "Frame it as being for their safety and to customize their program.\n"
                "Accept \"none\" or \"no\" as a valid answer - don't push for details."
            ),
            examples=[
                '"Last thing - any injuries or physical limitations I should know about?"',
                '"For your safety - any physical limitations or injuries we need to work around?"',
            ],
            target_fields=["physicalLimitations"],
        )
    return GoalInstruction(instruction="Injury info captured. No question needed.")
