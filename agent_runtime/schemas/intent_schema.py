"""Structured output of the intent detection stage."""

from enum import Enum
from typing import Optional

from pydantic import Field

from agent_runtime.schemas.base import CamelModel


class PrimaryIntent(str, Enum):
    COMPANY_INFO_REQUEST = "company_info_request"
    WORKFLOW_DATA_CAPTURE = "workflow_data_capture"
    GENERAL_CONVERSATION = "general_conversation"
    OBJECTION = "objection"
    SCHEDULING = "scheduling"
    END_CONVERSATION = "end_conversation"
    UNKNOWN = "unknown"


class WorkflowField(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    GENDER = "gender"
    PRIMARY_GOAL = "primaryGoal"
    MOTIVATION_REASON = "motivationReason"
    MOTIVATION_CATEGORIES = "motivationCategories"
    TIMELINE = "timeline"
    HEIGHT = "height"
    WEIGHT = "weight"
    BODY_FAT_PERCENTAGE = "bodyFatPercentage"
    INJURIES = "injuries"
    MEDICAL_CONDITIONS = "medicalConditions"
    PHYSICAL_LIMITATIONS = "physicalLimitations"
    DOCTOR_CLEARANCE = "doctorClearance"
    PREFERRED_DATE = "preferredDate"
    PREFERRED_TIME = "preferredTime"
    NORMALIZED_DATE_TIME = "normalizedDateTime"
    WRONG_PHONE = "wrong_phone"
    WRONG_EMAIL = "wrong_email"


class CompanyInfoCategory(str, Enum):
    HOURS = "hours"
    PRICING = "pricing"
    PLANS = "plans"
    PROMOTIONS = "promotions"
    LOCATION = "location"
    SERVICES = "services"
    STAFF = "staff"
    CONTACT = "contact"
    WEBSITE = "website"
    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"


class ConversationComplexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class EmotionalTone(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    FRUSTRATED = "frustrated"
    URGENT = "urgent"


class ExtractedDataItem(CamelModel):
    field: WorkflowField
    value: str


class LanguageProfile(CamelModel):
    """The user's communication style, used for personalization."""

    formality: int = Field(default=3, ge=1, le=5)
    hype_tolerance: int = Field(default=3, ge=1, le=5)
    emoji_usage: int = Field(default=0, ge=0, le=5)
    language: str = "en"


class IntentDetectionResult(CamelModel):
    """What the user said and what context the reply needs."""

    primary_intent: PrimaryIntent
    extracted_data: Optional[list[ExtractedDataItem]] = None
    # Single-field format kept for older prompts. Only read when
    # extracted_data is absent.
    detected_workflow_intent: Optional[WorkflowField] = None
    extracted_value: Optional[str] = None
    company_info_requested: Optional[list[CompanyInfoCategory]] = None
    requires_deep_context: bool = False
    conversation_complexity: ConversationComplexity = ConversationComplexity.MODERATE
    detected_emotional_tone: Optional[EmotionalTone] = None
    interest_level: int = Field(default=3, ge=1, le=5)
    conversion_likelihood: float = Field(default=0.5, ge=0.0, le=1.0)
    language_profile: LanguageProfile = Field(default_factory=LanguageProfile)

    @classmethod
    def neutral_fallback(cls) -> "IntentDetectionResult":
        """Result used when intent detection fails, so the turn can continue."""
        return cls(
            primary_intent=PrimaryIntent.GENERAL_CONVERSATION,
            extracted_data=None,
            detected_workflow_intent=None,
            extracted_value=None,
            company_info_requested=None,
            requires_deep_context=False,
            conversation_complexity=ConversationComplexity.MODERATE,
            detected_emotional_tone=None,
            interest_level=3,
            conversion_likelihood=0.5,
            language_profile=LanguageProfile(
                formality=3, hype_tolerance=3, emoji_usage=0, language="en"
            ),
        )

    @property
    def requested_categories(self) -> list[str]:
        return [category.value for category in self.company_info_requested or []]
