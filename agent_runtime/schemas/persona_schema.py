"""Persona and company records supplied by the host."""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import Field

from agent_runtime.config import settings
from agent_runtime.schemas.base import CamelModel
from agent_runtime.schemas.goal_schema import GoalConfiguration

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class PersonalityTraits(CamelModel):
    verbosity: Optional[int] = None
    enthusiasm: Optional[int] = None
    warmth: Optional[int] = None


class AgentPersona(CamelModel):
    """The character the agent plays. ``system_prompt`` is the persona's own voice."""

    id: Optional[str] = None
    name: str = "the assistant"
    role: Optional[str] = None
    system_prompt: str = ""
    personality_traits: PersonalityTraits = Field(default_factory=PersonalityTraits)
    goal_configuration: Optional[GoalConfiguration] = None

    @property
    def verbosity(self) -> int:
        return self.personality_traits.verbosity or settings.conversation.default_verbosity


class HoursSlot(CamelModel):
    from_: str = Field(alias="from")
    to: str


class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class PricingPlan(CamelModel):
    name: str
    price: str
    description: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    popular: bool = False


class Pricing(CamelModel):
    plans: list[PricingPlan] = Field(default_factory=list)
    custom_pricing_available: bool = False


class Promotion(CamelModel):
    title: str
    description: str = ""
    valid_until: datetime
    urgency_message: Optional[str] = None
    conditions: list[str] = Field(default_factory=list)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        if self.valid_until.tzinfo is None:
            now = (now or datetime.now()).replace(tzinfo=None)
        else:
            now = now or datetime.now(timezone.utc)
            if now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
        return self.valid_until > now


class CompanyInfo(CamelModel):
    name: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    business_hours: Optional[dict[str, list[HoursSlot]]] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[Address] = None
    services: list[str] = Field(default_factory=list)
    products: list[Any] = Field(default_factory=list)
    pricing: Optional[Pricing] = None
    promotions: list[Promotion] = Field(default_factory=list)
    goal_configuration: Optional[GoalConfiguration] = None

    @property
    def display_name(self) -> str:
        return self.name or settings.conversation.default_company_name

    def hours_for(self, day: str) -> list[HoursSlot]:
        if not self.business_hours:
            return []
        return self.business_hours.get(day.lower(), [])
