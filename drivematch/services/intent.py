"""Query intent extractor: free text -> filter criteria, sort, intent, trace.

The extractor is a fixed, ordered cascade of independent rules. Each rule is
a pure function ``(text, state) -> state`` that inspects the lower-cased
query for one cue family and, when it matches, sets fields in the criteria,
appends a sentence to the reasoning trace and appends a context tag.
``interpret`` is a left fold over ``RULE_ORDER``.

Precedence is last-write-wins in ``RULE_ORDER``: the use-case rule runs after
the explicit fuel and price rules and silently replaces them ("cheap diesel
under 12 lakh" ends up with the budget ceiling, not 12 lakh). Within the
use-case rule, luxury is checked after budget, so a query matching both ends
up with the luxury floor only.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from drivematch.core.enums import (
    BASE_CONFIDENCE,
    FuelType,
    Intent,
    SortField,
    Transmission,
    VehicleType,
)
from drivematch.core.exceptions import QueryValidationError
from drivematch.models.criteria import (
    Condition,
    Exact,
    FilterCriteria,
    Pattern,
    Range,
    SortDirective,
    freeze,
)

# =============================================================================
# KEYWORD CONSTANTS
# =============================================================================

CAR_RE = re.compile(r"car|sedan|suv|hatchback|jeep")
BIKE_RE = re.compile(r"bike|motorcycle|scooter|moped")

# Canonical brand -> spellings/synonyms. The canonical name itself always
# matches. Order matters: first hit wins.
BRAND_VARIANTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("tata", ("tata",)),
    ("mahindra", ("mahindra",)),
    ("maruti suzuki", ("maruti", "suzuki")),
    ("hyundai", ("hundai", "hyund")),
    ("toyota", ("toyta", "toyotta")),
    ("kia", ("kia",)),
    ("honda", ("honda",)),
    ("renault", ("renault",)),
    ("nissan", ("nissan",)),
    ("skoda", ("skoda",)),
    ("volkswagen", ("vw", "volks", "volkwagen")),
    ("audi", ("audi",)),
    ("bmw", ("bmw",)),
    ("mercedes", ("mercedez", "benz")),
    ("bajaj", ("bajaj",)),
    ("hero", ("hero",)),
    ("yamaha", ("yamaha",)),
    ("royal enfield", ("enfield", "bullet")),
    ("tvs", ("tvs",)),
)

# Checked in this order; first family that matches sets fuel_type.
FUEL_FAMILIES: tuple[tuple[re.Pattern[str], FuelType], ...] = (
    (re.compile(r"electric|ev|battery"), FuelType.ELECTRIC),
    (re.compile(r"diesel"), FuelType.DIESEL),
    (re.compile(r"petrol|gasoline"), FuelType.PETROL),
    (re.compile(r"hybrid|plug-in"), FuelType.HYBRID),
    (re.compile(r"cng|gas"), FuelType.CNG),
)

PRICE_MULTIPLIERS: dict[str, int] = {"lakh": 100_000, "lakhs": 100_000, "k": 1_000}

_AMOUNT = r"(\d+)(?:\s?(lakhs?|k)\b)?"
BETWEEN_RE = re.compile(rf"between\s?{_AMOUNT}\s?(?:and|to)\s?{_AMOUNT}")
UNDER_RE = re.compile(rf"under\s?{_AMOUNT}")
ABOVE_RE = re.compile(rf"above\s?{_AMOUNT}")

ENGINE_RE = re.compile(r"(\d+)\s?(cc|bhp)")
MILEAGE_RE = re.compile(r"mileage\s?(?:above|over|more than)?\s?(\d+)")

FAMILY_BODY_PATTERN = "suv|sedan"
FAMILY_MIN_MILEAGE = 15
SPORT_MIN_PERFORMANCE = 80
ECO_FUEL_PATTERN = "electric|hybrid"
BUDGET_MAX_PRICE = 800_000
LUXURY_MIN_PRICE = 2_000_000


# =============================================================================
# INTERPRETATION STATE
# =============================================================================


@dataclass(frozen=True)
class InterpretationState:
    """Accumulator threaded through the rule cascade. Never mutated in place."""

    criteria: dict[str, Condition] = field(default_factory=dict)
    sort: Optional[SortDirective] = None
    intent: Intent = Intent.FILTER
    reasoning: tuple[str, ...] = ()
    context_tags: tuple[str, ...] = ()

    def set(self, field_name: str, condition: Condition) -> "InterpretationState":
        return replace(self, criteria={**self.criteria, field_name: condition})

    def note(self, sentence: str, tag: str | None = None) -> "InterpretationState":
        tags = self.context_tags + (tag,) if tag else self.context_tags
        return replace(self, reasoning=self.reasoning + (sentence,), context_tags=tags)


@dataclass(frozen=True)
class Interpretation:
    """Result of ``interpret``; criteria are frozen for the compiler."""

    criteria: FilterCriteria
    sort: Optional[SortDirective]
    intent: Intent
    reasoning: list[str]
    context_tags: list[str]
    confidence_seed: int = BASE_CONFIDENCE

    @property
    def category(self) -> str | None:
        condition = self.criteria.get("type")
        return condition.value if isinstance(condition, Exact) else None

    @property
    def brand(self) -> str | None:
        condition = self.criteria.get("brand")
        return condition.pattern if isinstance(condition, Pattern) else None


@dataclass(frozen=True)
class Rule:
    name: str
    apply: Callable[[str, InterpretationState], InterpretationState]


# =============================================================================
# RULES
# =============================================================================


def parse_price(amount: str, unit: str | None) -> int:
    """'5', 'lakh' -> 500000. Bare digits are taken as rupees.

    Examples:
        >>> parse_price("5", "lakh")
        500000
        >>> parse_price("800", "k")
        800000
        >>> parse_price("250000", None)
        250000
    """
    return int(amount) * PRICE_MULTIPLIERS.get(unit or "", 1)


def category_rule(text: str, state: InterpretationState) -> InterpretationState:
    if CAR_RE.search(text):
        category = VehicleType.CAR
    elif BIKE_RE.search(text):
        category = VehicleType.BIKE
    else:
        return state
    return state.set("type", Exact(category.value)).note(
        f"Detected vehicle type: {category.value.capitalize()}.", f"type:{category.value}"
    )


def brand_rule(text: str, state: InterpretationState) -> InterpretationState:
    for brand, variants in BRAND_VARIANTS:
        if any(v in text for v in (brand, *variants)):
            return state.set("brand", Pattern(brand)).note(
                f"Brand detected: {brand}", f"brand:{brand}"
            )
    return state


def fuel_rule(text: str, state: InterpretationState) -> InterpretationState:
    for pattern, fuel in FUEL_FAMILIES:
        if pattern.search(text):
            return state.set("fuel_type", Exact(fuel.value)).note(
                f"Detected {fuel.value} vehicles.", f"fuel:{fuel.value.lower()}"
            )
    return state


def price_rule(text: str, state: InterpretationState) -> InterpretationState:
    between = BETWEEN_RE.search(text)
    if between:
        low = parse_price(between.group(1), between.group(2))
        high = parse_price(between.group(3), between.group(4))
        return state.set("price", Range(gte=low, lte=high)).note(
            f"Price range detected between {low} and {high}.", "price:between"
        )
    under = UNDER_RE.search(text)
    if under:
        price = parse_price(under.group(1), under.group(2))
        return state.set("price", Range(lte=price)).note(
            f"Price detected: under {price}.", "price:under"
        )
    above = ABOVE_RE.search(text)
    if above:
        price = parse_price(above.group(1), above.group(2))
        return state.set("price", Range(gte=price)).note(
            f"Price detected: above {price}.", "price:above"
        )
    return state


def transmission_rule(text: str, state: InterpretationState) -> InterpretationState:
    for gearbox in (Transmission.AUTOMATIC, Transmission.MANUAL):
        if gearbox.value.lower() in text:
            return state.set("transmission", Exact(gearbox.value)).note(
                f"Transmission preference: {gearbox.value}.",
                f"transmission:{gearbox.value.lower()}",
            )
    return state


def engine_mileage_rule(text: str, state: InterpretationState) -> InterpretationState:
    engine = ENGINE_RE.search(text)
    if engine:
        size = int(engine.group(1))
        state = state.set("engine_power", Range(gte=size)).note(
            f"Engine size ≥ {size} {engine.group(2)}.", f"engine:{size}{engine.group(2)}"
        )
    mileage = MILEAGE_RE.search(text)
    if mileage:
        kmpl = int(mileage.group(1))
        state = state.set("mileage", Range(gte=kmpl)).note(
            f"Mileage requirement ≥ {kmpl} km/l.", f"mileage:{kmpl}"
        )
    return state


def use_case_rule(text: str, state: InterpretationState) -> InterpretationState:
    """Compound heuristics; each one overwrites whatever earlier rules set."""
    if "family" in text:
        state = (
            state.set("body_type", Pattern(FAMILY_BODY_PATTERN))
            .set("mileage", Range(gte=FAMILY_MIN_MILEAGE))
            .note(
                "User wants a family vehicle — prioritizing SUVs or sedans.",
                "usecase:family",
            )
        )
    if "sport" in text or "fast" in text or "performance" in text:
        state = state.set("performance_score", Range(gte=SPORT_MIN_PERFORMANCE)).note(
            "Sporty preference — prioritizing high performance vehicles.",
            "usecase:sport",
        )
    if "eco" in text or "low emission" in text:
        state = state.set("fuel_type", Pattern(ECO_FUEL_PATTERN)).note(
            "Eco-friendly preference detected.", "usecase:eco"
        )
    if "budget" in text or "affordable" in text or "cheap" in text:
        state = state.set("price", Range(lte=BUDGET_MAX_PRICE)).note(
            "Budget-focused search detected.", "usecase:budget"
        )
    if "luxury" in text or "premium" in text:
        state = state.set("price", Range(gte=LUXURY_MIN_PRICE)).note(
            "Luxury segment detected.", "usecase:luxury"
        )
    return state


def intent_sort_rule(text: str, state: InterpretationState) -> InterpretationState:
    """Intent label and sort directive; independent checks, last match wins."""
    intent = state.intent
    if "recommend" in text or "suggest" in text:
        intent = Intent.RECOMMEND
    if "compare" in text:
        intent = Intent.COMPARE

    sort = state.sort
    if "best" in text or "top" in text:
        sort = SortDirective(SortField.PERFORMANCE_SCORE.value, descending=True)
    if "latest" in text or "new" in text:
        sort = SortDirective(SortField.CREATED_AT.value, descending=True)
    if "cheapest" in text or "lowest" in text:
        sort = SortDirective(SortField.PRICE.value, descending=False)

    state = replace(state, intent=intent, sort=sort)
    if intent is not Intent.FILTER:
        state = state.note(f"Intent detected: {intent.value}.", f"intent:{intent.value}")
    if sort is not None:
        direction = "descending" if sort.descending else "ascending"
        state = state.note(f"Sorting results by {sort.field} ({direction}).")
    return state


RULE_ORDER: tuple[Rule, ...] = (
    Rule("category", category_rule),
    Rule("brand", brand_rule),
    Rule("fuel", fuel_rule),
    Rule("price", price_rule),
    Rule("transmission", transmission_rule),
    Rule("engine_mileage", engine_mileage_rule),
    Rule("use_case", use_case_rule),
    Rule("intent_sort", intent_sort_rule),
)


def interpret(text: str | None, rules: tuple[Rule, ...] = RULE_ORDER) -> Interpretation:
    """Run the rule cascade over ``text``. Pure; no I/O.

    Raises:
        QueryValidationError: ``text`` is empty or whitespace-only.
    """
    if not text or not text.strip():
        raise QueryValidationError("Please provide a query text.")

    lowered = text.lower()
    state = InterpretationState()
    for rule in rules:
        state = rule.apply(lowered, state)

    return Interpretation(
        criteria=freeze(state.criteria),
        sort=state.sort,
        intent=state.intent,
        reasoning=list(state.reasoning),
        context_tags=list(state.context_tags),
    )
