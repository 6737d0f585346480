"""Rule tables that turn tomorrow's weather and the user's options into an outfit.

Every category is evaluated independently. Top, bottom and shoes are
mutually exclusive decision trees that always yield exactly one item; outer,
accessories and essentials are additive and may stay empty.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.schemas.outfit import RecommendItem, RecommendationSet, UserOptions


COLD_FEELS_LIKE_C = 5
VERY_COLD_FEELS_LIKE_C = 0
TIP_LARGE_DIFF_C = 5

OUTDOOR_EXPOSURE_TRANSPORT = frozenset({"walking", "bicycle", "motorcycle", "kickboard"})


@dataclass(frozen=True, slots=True)
class OutfitSignals:
    is_warm_style: bool
    is_formal_style: bool
    is_sporty_style: bool
    is_casual_style: bool
    is_outdoor_exposure: bool
    is_snowy: bool
    is_rainy: bool
    is_cold: bool
    is_very_cold: bool
    schedule_type: str

    @property
    def is_precipitation(self) -> bool:
        return self.is_snowy or self.is_rainy

    @property
    def is_business(self) -> bool:
        return self.is_formal_style or self.schedule_type in {"work", "meeting"}

    @property
    def is_active(self) -> bool:
        return self.is_sporty_style or self.schedule_type == "exercise"


def derive_signals(options: UserOptions, condition: str, feels_like: int) -> OutfitSignals:
    return OutfitSignals(
        is_warm_style=options.has_style("warm"),
        is_formal_style=options.has_style("formal", "business_casual"),
        is_sporty_style=options.has_style("sporty"),
        is_casual_style=options.has_style("casual"),
        is_outdoor_exposure=options.transportation in OUTDOOR_EXPOSURE_TRANSPORT,
        is_snowy=condition == "snowy",
        is_rainy=condition == "rainy",
        is_cold=feels_like < COLD_FEELS_LIKE_C,
        is_very_cold=feels_like < VERY_COLD_FEELS_LIKE_C,
        schedule_type=options.schedule_type,
    )


def recommend(
    options: UserOptions,
    condition: str = "sunny",
    temperature: int = 0,
    feels_like: int = 0,
) -> RecommendationSet:
    signals = derive_signals(options, condition, feels_like)
    return RecommendationSet(
        outer=_outer(signals, temperature, feels_like),
        top=[_top(signals)],
        bottom=[_bottom(signals)],
        shoes=[_shoes(signals)],
        accessories=_accessories(signals),
        essentials=_essentials(signals, feels_like),
    )


def _item(category: str, id: str, name: str, icon: str, reason: str, priority: int = 1) -> RecommendItem:
    return RecommendItem(id=id, name=name, icon=icon, reason=reason, priority=priority, category=category)


def _outer(s: OutfitSignals, temperature: int, feels_like: int) -> list[RecommendItem]:
    items: list[RecommendItem] = []
    if s.is_very_cold or (s.is_warm_style and s.is_cold):
        items.append(_item("outer", "o1", "롱패딩", "🧥", f"체감온도 {feels_like}°C"))
    if s.is_formal_style and s.is_cold:
        items.append(_item("outer", "o2", "울 코트", "🧥", "포멀한 느낌", priority=2))
    if s.is_sporty_style:
        items.append(_item("outer", "o3", "패딩 점퍼", "🧥", "활동성 좋음", priority=2))
    if not items and s.is_cold:
        items.append(_item("outer", "o4", "숏패딩", "🧥", f"기온 {temperature}°C"))
    return items


def _top(s: OutfitSignals) -> RecommendItem:
    if s.is_business:
        return _item("top", "t1", "기모 셔츠" if s.is_cold else "면 셔츠", "👔", "비즈니스 룩")
    if s.is_active:
        return _item("top", "t2", "기모 맨투맨" if s.is_cold else "드라이핏", "👕", "운동에 적합")
    if s.is_casual_style or s.schedule_type == "date":
        return _item("top", "t3", "울 니트" if s.is_cold else "가디건", "🧶", "캐주얼 + 스타일")
    return _item("top", "t4", "맨투맨", "👕", "편안함")


def _bottom(s: OutfitSignals) -> RecommendItem:
    if s.is_business:
        return _item("bottom", "b1", "기모 슬랙스" if s.is_cold else "슬랙스", "👖", "비즈니스 + 보온")
    if s.is_active:
        return _item("bottom", "b2", "기모 조거팬츠" if s.is_cold else "트레이닝", "👖", "활동성")
    return _item("bottom", "b3", "기모 청바지" if s.is_cold else "청바지", "👖", "캐주얼")


def _shoes(s: OutfitSignals) -> RecommendItem:
    if s.is_snowy:
        return _item("shoes", "s1", "방한 부츠", "🥾", "눈길 미끄럼 방지")
    if s.is_rainy:
        return _item("shoes", "s2", "레인부츠", "👢", "비 오는 날 필수")
    if s.is_formal_style:
        return _item("shoes", "s3", "구두/로퍼", "👞", "포멀 스타일")
    if s.is_sporty_style:
        return _item("shoes", "s4", "운동화", "👟", "활동성")
    return _item("shoes", "s5", "방한 운동화" if s.is_cold else "스니커즈", "👟", "편안함")


def _accessories(s: OutfitSignals) -> list[RecommendItem]:
    items: list[RecommendItem] = []
    if s.is_cold:
        items.append(_item("accessory", "a1", "목도리", "🧣", "목 보온"))
    if s.is_very_cold or s.is_outdoor_exposure:
        items.append(_item("accessory", "a2", "장갑", "🧤", "손 보온"))
    if s.is_outdoor_exposure and s.is_very_cold:
        items.append(_item("accessory", "a3", "귀마개", "🎧", "귀 보온", priority=2))
    if s.schedule_type == "date":
        items.append(_item("accessory", "a4", "향수", "🌸", "데이트 필수템", priority=2))
    return items


def _essentials(s: OutfitSignals, feels_like: int) -> list[RecommendItem]:
    items: list[RecommendItem] = []
    if s.is_precipitation:
        items.append(_item("essential", "e1", "우산", "☂️", "눈 대비" if s.is_snowy else "비 대비"))
    if s.is_very_cold:
        items.append(_item("essential", "e2", "핫팩", "🔥", f"체감온도 {feels_like}°C"))
    if s.schedule_type in {"travel", "outdoor"}:
        items.append(_item("essential", "e3", "보조배터리", "🔋", "야외 활동 필수", priority=2))
    return items


def weather_tip(today_temp: int, tomorrow_temp: int, tomorrow_condition: str) -> str:
    diff = today_temp - tomorrow_temp
    if diff > TIP_LARGE_DIFF_C:
        tip = f"내일은 오늘보다 {diff}도 낮습니다. 따뜻하게 입으세요!"
    elif diff < -TIP_LARGE_DIFF_C:
        tip = f"내일은 오늘보다 {abs(diff)}도 높습니다. 가볍게 입으세요!"
    elif diff > 0:
        tip = f"내일은 오늘보다 {diff}도 낮습니다."
    elif diff < 0:
        tip = f"내일은 오늘보다 {abs(diff)}도 높습니다."
    else:
        tip = "오늘과 내일 기온이 비슷합니다."

    if tomorrow_condition == "snowy":
        tip += " 눈이 예보되어 있어 미끄럼 주의하세요."
    elif tomorrow_condition == "rainy":
        tip += " 비가 예보되어 있어 우산을 챙기세요."
    return tip


__all__ = ["OutfitSignals", "derive_signals", "recommend", "weather_tip"]
