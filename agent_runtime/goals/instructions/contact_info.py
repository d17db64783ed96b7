"""
Contact info instructions (email and phone).

Asks for both at once when neither is captured, otherwise for the missing
one. When a session time was already picked, the ask references it so
the contact details read as the way to confirm the booking.
"""

from agent_runtime.goals.instructions.base import GoalInstruction, GoalInstructionContext


def _scheduling_context(context: GoalInstructionContext) -> str:
    state = context.channel_state
    if state is None:
        return ""
    preferred_date = state.captured_value("preferredDate")
    preferred_time = state.captured_value("preferredTime")
    if preferred_date and preferred_time:
        return f"their {preferred_date} at {preferred_time} session"
    if preferred_date:
        return f"their {preferred_date} session"
    if preferred_time:
        return f"their {preferred_time} session"
    return ""


def get_contact_info_instruction(context: GoalInstructionContext) -> GoalInstruction:
    needs_email = context.needs("email")
    needs_phone = context.needs("phone")
    has_email = context.has("email")
    has_phone = context.has("phone")
    session = _scheduling_context(context)

    if needs_email and needs_phone and not has_email and not has_phone:
        if session:
            return GoalInstruction(
                instruction=(
                    f"Ask for BOTH email AND phone to CONFIRM {session}.\n"
                    "The user already picked a time - now we need contact info to lock it in "
                    "and send confirmation."
                ),
                examples=[
                    f'"To lock in {session}, what\'s your email and phone?"',
                    f'"Perfect! To confirm {session}, drop me your email and number."',
                ],
                target_fields=["email", "phone"],
            )
        return GoalInstruction(
            instruction=(
                "Ask for BOTH email AND phone in ONE question.\n"
                "Keep it casual and natural - explain we need it to get them scheduled."
            ),
            examples=[
                "\"What's your email and phone number so I can get you scheduled?\"",
                '"Drop me your email and number so we can lock in your session!"',
                "\"To get you on the calendar, what's your email and phone?\"",
            ],
            target_fields=["email", "phone"],
        )

    if needs_phone and not has_phone and has_email:
        suffix = f" for {session}" if session else ""
        return GoalInstruction(
            instruction=(
                f"User already gave their email. Now ask for their phone number only{suffix}.\n"
                "Acknowledge you have their email and just need the phone to complete the booking."
            ),
            examples=[
                f"\"Got your email! What's your phone number so I can confirm{suffix}?\"",
                "\"Email locked in! What's the best number to text you the confirmation?\"",
            ],
            target_fields=["phone"],
        )

    if needs_email and not has_email and has_phone:
        suffix = f" for {session}" if session else ""
        return GoalInstruction(
            instruction=(
                f"User already gave their phone. Now ask for their email only{suffix}.\n"
                "Acknowledge you have their number and just need the email to send confirmation."
            ),
            examples=[
                f"\"Got your number! What's your email so I can send the confirmation{suffix}?\"",
                '"Perfect! And your email for the booking confirmation?"',
            ],
            target_fields=["email"],
        )

    if needs_phone and not needs_email and not has_phone:
        suffix = f" to confirm {session}" if session else " to book your session"
        return GoalInstruction(
            instruction=(
                f"Ask for their phone number{suffix}.\n"
                "If they only give phone, that's fine - goal is met."
            ),
            examples=[
                f"\"What's your phone number{suffix}?\"",
                "\"Drop me your number and I'll lock it in!\"",
            ],
            target_fields=["phone"],
        )

    if needs_email and not needs_phone and not has_email:
        suffix = f" for {session}" if session else ""
        return GoalInstruction(
            instruction=(
                f"Ask for their email address to send booking confirmation{suffix}.\n"
                "If they only give email, that's fine - goal is met."
            ),
            examples=[
                f"\"What's your email so I can send the confirmation{suffix}?\"",
                '"Drop me your email for the booking confirmation!"',
            ],
            target_fields=["email"],
        )

    still_needed = context.still_needed
    if still_needed:
        return GoalInstruction(
            instruction=f"Ask for: {' and '.join(still_needed)}.",
            target_fields=still_needed,
        )
    return GoalInstruction(instruction="Contact info is complete. No question needed.")
