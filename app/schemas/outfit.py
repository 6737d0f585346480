from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.weather import WeatherCondition


TransportationType = Literal[
    "car",
    "taxi",
    "public_transit",
    "bicycle",
    "motorcycle",
    "walking",
    "kickboard",
]

ScheduleType = Literal[
    "work",
    "meeting",
    "date",
    "travel",
    "exercise",
    "school",
    "home",
    "event",
    "outdoor",
    "casual_outing",
]

FashionStyle = Literal[
    "casual",
    "formal",
    "business_casual",
    "sporty",
    "minimal",
    "street",
    "lovely",
    "classic",
    "warm",
    "light",
]

ItemCategory = Literal["outer", "top", "bottom", "shoes", "accessory", "essential"]

CATEGORY_ORDER: tuple[str, ...] = ("outer", "top", "bottom", "shoes", "accessories", "essentials")


class UserOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    transportation: TransportationType = "public_transit"
    schedule_type: ScheduleType = "work"
    fashion_styles: List[FashionStyle] = Field(default_factory=lambda: ["casual", "warm"])
    schedule_description: str = ""

    @field_validator("fashion_styles", mode="after")
    @classmethod
    def dedupe_styles(cls, v: list[str]) -> list[str]:
        seen: list[str] = []
        for style in v:
            if style not in seen:
                seen.append(style)
        return seen

    def has_style(self, *styles: str) -> bool:
        return any(style in self.fashion_styles for style in styles)


class UserOptionsPatch(BaseModel):
    """Partial update of the stored options."""

    transportation: TransportationType | None = None
    schedule_type: ScheduleType | None = None
    fashion_styles: List[FashionStyle] | None = None
    schedule_description: str | None = None


class RecommendItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str
    reason: str
    priority: int = Field(1, ge=1)
    category: ItemCategory


class RecommendationSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    outer: List[RecommendItem] = Field(default_factory=list)
    top: List[RecommendItem] = Field(default_factory=list)
    bottom: List[RecommendItem] = Field(default_factory=list)
    shoes: List[RecommendItem] = Field(default_factory=list)
    accessories: List[RecommendItem] = Field(default_factory=list)
    essentials: List[RecommendItem] = Field(default_factory=list)

    def ranked(self) -> list[RecommendItem]:
        """All items ordered by priority, ties kept in category/insertion order."""
        items = [item for name in CATEGORY_ORDER for item in getattr(self, name)]
        return sorted(items, key=lambda item: item.priority)


class RecommendationRequest(BaseModel):
    options: UserOptions = Field(default_factory=UserOptions)
    condition: WeatherCondition = "sunny"
    temperature: int = 0
    feels_like: int = 0


class WeatherTipResponse(BaseModel):
    tip: str
