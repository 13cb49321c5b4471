from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import List, Optional

from line_rules import LineRule, compose, first_match, join_block, label_value, split_lines
from note_models import NoteType, ParsedIngredient, ParsedRecipe
from quantity_format import FRACTION_GLYPHS, format_quantity, parse_quantity, scale_quantity
from trigger_tags import canonical_tag, strip_trigger_tag

logger = logging.getLogger(__name__)


# Section states, in the order a recipe is usually written.
TITLE = "title"
META = "meta"
INGREDIENTS = "ingredients"
STEPS = "steps"
NOTES = "notes"

_BULLET_RE = re.compile(r"^[-•*·◦]\s*")
_ORDINAL_RE = re.compile(r"^\d+[.)]\s+")
_STEP_MARKER_RE = re.compile(r"^(?:step\s*\d+\s*[:.)-]?|\d+[.)])\s*", re.IGNORECASE)
_DIGIT_RUN_RE = re.compile(r"\d+")
_TIME_RE = re.compile(
    r"\d+(?:\.\d+)?(?:\s*-\s*\d+)?\s*(?:hours?|hrs?|hr|minutes?|mins?|min)\b"
    r"(?:\s*(?:and\s*)?\d+\s*(?:minutes?|mins?|min)\b)?",
    re.IGNORECASE,
)
_NOTES_HEADER_RE = re.compile(r"^(?:notes?|tips?)\s*(?::\s*(.*))?$", re.IGNORECASE)
_INGREDIENT_HEADER_RE = re.compile(r"ingredient", re.IGNORECASE)
_STEP_HEADER_RE = re.compile(r"instruction|direction|\bsteps?\b|\bmethod\b", re.IGNORECASE)
_SERVINGS_KEYWORD_RE = re.compile(r"^(?:serves?|servings?|yields?|makes)\b|\b\d+\s+servings?\b", re.IGNORECASE)
_PREP_KEYWORD_RE = re.compile(r"^prep(?:aration)?(?:\s+time)?\b", re.IGNORECASE)
_COOK_KEYWORD_RE = re.compile(r"^(?:cook|bake|baking|cooking|total)(?:\s+time)?\b", re.IGNORECASE)

_UNIT_RE = re.compile(
    r"\b(cups?|c|tbsps?|tbs|tsps?|tablespoons?|teaspoons?|oz|ounces?|lbs?|pounds?|g|grams?|kg|"
    r"ml|l|liters?|litres?|pinch(?:es)?|cloves?|cans?|packages?|pkg|sticks?|slices?|dash(?:es)?|"
    r"quarts?|qt|pints?|pt|gallons?|bunch(?:es)?|heads?|sprigs?|handfuls?)\b",
    re.IGNORECASE,
)
_COOKING_VERBS = {
    "add", "bake", "beat", "blend", "boil", "bring", "chill", "chop", "combine", "cook",
    "cover", "cream", "cut", "dice", "drain", "fold", "fry", "garnish", "grease", "grill",
    "heat", "knead", "let", "line", "melt", "mince", "mix", "peel", "place", "pour",
    "preheat", "put", "reduce", "refrigerate", "remove", "rinse", "roast", "roll",
    "saute", "sauté", "season", "serve", "set", "simmer", "slice", "spread", "sprinkle",
    "stir", "toss", "transfer", "whisk",
}

_SHORT_INGREDIENT_LEN = 60
_HEADER_MAX_WORDS = 3

_SERVINGS_LABELS = ("servings:", "serves:", "serving:", "yield:", "yields:", "makes:")
_PREP_LABELS = ("prep time:", "prep:", "preparation:")
_COOK_LABELS = ("cook time:", "cooking time:", "cook:", "bake time:", "baking time:", "bake:", "total time:")


def _unbulleted(line: str) -> str:
    return _BULLET_RE.sub("", line, count=1)


def extract_time(text: str) -> Optional[str]:
    m = _TIME_RE.search(text or "")
    return m.group(0) if m else None


def _starts_numeric(s: str) -> bool:
    return bool(s) and (s[0].isdigit() or s[0] in FRACTION_GLYPHS)


def looks_like_ingredient(line: str) -> bool:
    """Leads with a quantity and is short or names a unit: "2 cups flour", "½ tsp salt"."""
    s = _unbulleted(line)
    if not _starts_numeric(s) or _ORDINAL_RE.match(s):
        return False
    return len(s) < _SHORT_INGREDIENT_LEN or bool(_UNIT_RE.search(s))


def looks_like_step(line: str) -> bool:
    """Numbered ("1. Mix", "Step 2: ...") or led by a cooking verb."""
    if _ORDINAL_RE.match(line) or re.match(r"^step\s*\d+", line, re.IGNORECASE):
        return True
    words = line.split(None, 1)
    if not words:
        return False
    return words[0].strip(".,:;!").lower() in _COOKING_VERBS


def _section_header(line: str) -> Optional[str]:
    """A short line naming a section; quantity- or bullet-led lines never are."""
    if _starts_numeric(line) or _BULLET_RE.match(line):
        return None
    if len(line.rstrip(":").split()) > _HEADER_MAX_WORDS:
        return None
    if _INGREDIENT_HEADER_RE.search(line):
        return INGREDIENTS
    if _STEP_HEADER_RE.search(line):
        return STEPS
    return None


def strip_step_marker(line: str) -> str:
    return _STEP_MARKER_RE.sub("", line, count=1).strip()


def parse_ingredient(line: str) -> ParsedIngredient:
    """
    "1 1/2 cups flour" -> quantity 1.5, display "1½", name "cups flour".
    Lines without a leading quantity keep the whole text as the name.
    """
    text = (line or "").strip()
    quantity, rest = parse_quantity(_unbulleted(text))
    if quantity is None:
        return ParsedIngredient(original_text=text, name=rest)
    return ParsedIngredient(
        original_text=text,
        quantity=quantity,
        display_quantity=format_quantity(quantity),
        name=rest,
    )


# Meta rules: servings take the first digit run, times keep the time phrase.
def _servings_value(value: str) -> str:
    m = _DIGIT_RUN_RE.search(value)
    return m.group(0) if m else value


def _labeled(labels, pick):
    def match(line: str) -> Optional[str]:
        value = label_value(line, labels)
        if not value:
            return None
        return pick(value)
    return match


def _keyword(pattern, pick, max_words: Optional[int] = None):
    def match(line: str) -> Optional[str]:
        if not pattern.search(line):
            return None
        if max_words is not None and len(line.split()) > max_words:
            return None
        return pick(line)
    return match


def _digit_run(text: str) -> Optional[str]:
    m = _DIGIT_RUN_RE.search(text)
    return m.group(0) if m else None


def _setter(attr: str):
    def apply(recipe: ParsedRecipe, value: str) -> None:
        if not getattr(recipe, attr):
            setattr(recipe, attr, value)
    return apply


META_RULES: List[LineRule] = [
    LineRule("servings", _labeled(_SERVINGS_LABELS, _servings_value), _setter("servings")),
    LineRule("prep_time", _labeled(_PREP_LABELS, lambda v: extract_time(v) or v), _setter("prep_time")),
    LineRule("cook_time", _labeled(_COOK_LABELS, lambda v: extract_time(v) or v), _setter("cook_time")),
    LineRule("servings", _keyword(_SERVINGS_KEYWORD_RE, _digit_run), _setter("servings")),
    LineRule("prep_time", _keyword(_PREP_KEYWORD_RE, extract_time), _setter("prep_time")),
    LineRule("cook_time", _keyword(_COOK_KEYWORD_RE, extract_time, max_words=5), _setter("cook_time")),
]


def _add_step(recipe: ParsedRecipe, line: str) -> None:
    step = strip_step_marker(line)
    if step:
        recipe.steps.append(step)


def extract_recipe(content: Optional[str]) -> ParsedRecipe:
    recipe = ParsedRecipe()
    state = TITLE
    loose: List[str] = []
    tail: List[str] = []

    for line in split_lines(strip_trigger_tag(content)):
        if state == NOTES:
            tail.append(line)
            continue
        if not line:
            continue

        notes_header = _NOTES_HEADER_RE.match(line)
        if notes_header:
            state = NOTES
            if notes_header.group(1):
                tail.append(notes_header.group(1).strip())
            continue

        header = _section_header(line)
        if header:
            state = header
            continue

        if state in (TITLE, META):
            meta = first_match(META_RULES, line)
            if meta:
                rule, value = meta
                rule.apply(recipe, value)
            elif looks_like_ingredient(line):
                recipe.ingredients.append(parse_ingredient(line))
                state = INGREDIENTS
            elif looks_like_step(line):
                _add_step(recipe, line)
                state = STEPS
            elif state == TITLE:
                recipe.title = line
                state = META
            else:
                loose.append(line)
        elif state == INGREDIENTS:
            if looks_like_step(line) and not looks_like_ingredient(line):
                state = STEPS
                _add_step(recipe, line)
            else:
                recipe.ingredients.append(parse_ingredient(line))
        else:
            _add_step(recipe, line)

    tail_text = join_block(tail)
    recipe.notes = join_block(loose + ([""] if loose and tail_text else []) + ([tail_text] if tail_text else []))
    logger.debug("recipe: %r ingredients=%d steps=%d", recipe.title, len(recipe.ingredients), len(recipe.steps))
    return recipe


def ingredient_line(ingredient: ParsedIngredient) -> str:
    """
    Unedited ingredients keep the text they were read from; edited ones are
    rebuilt from quantity and name.
    """
    original = (ingredient.original_text or "").strip()
    if original:
        reparsed = parse_ingredient(original)
        if reparsed.quantity == ingredient.quantity and reparsed.name == (ingredient.name or "").strip():
            return original
    name = " ".join((ingredient.name or "").split())
    if ingredient.quantity is not None:
        return f"{format_quantity(ingredient.quantity)} {name}".strip()
    return f"- {name}" if name else ""


def serialize_recipe(recipe: ParsedRecipe) -> str:
    headers: List[str] = []
    title = (recipe.title or "").strip()
    if title:
        headers.append(title)
    for label, value in (("Serves", recipe.servings), ("Prep", recipe.prep_time), ("Cook", recipe.cook_time)):
        value = (value or "").strip()
        if value:
            headers.append(f"{label}: {value}")

    sections: List[str] = []
    ingredients = [line for line in (ingredient_line(i) for i in recipe.ingredients) if line]
    if ingredients:
        sections.append("\n".join(["Ingredients:"] + ingredients))
    steps = [s.strip() for s in recipe.steps if (s or "").strip()]
    if steps:
        sections.append("\n".join(["Steps:"] + [f"{n}. {s}" for n, s in enumerate(steps, 1)]))
    notes = (recipe.notes or "").strip()
    if notes:
        sections.append(f"Notes:\n{notes}")

    return compose(headers, "\n\n".join(sections), tag=canonical_tag(NoteType.RECIPE))


def scale_ingredient(ingredient: ParsedIngredient, multiplier: float) -> ParsedIngredient:
    if ingredient.quantity is None:
        return replace(ingredient)
    quantity = scale_quantity(ingredient.quantity, multiplier)
    display = format_quantity(quantity)
    return ParsedIngredient(
        original_text=f"{display} {ingredient.name}".strip(),
        quantity=quantity,
        display_quantity=display,
        name=ingredient.name,
    )


def scaled_servings(servings: str, multiplier: float) -> str:
    """'4' x 1.5 -> '6'; servings without a number are left alone."""
    m = _DIGIT_RUN_RE.search(servings or "")
    if not m:
        return servings or ""
    scaled = format_quantity(int(m.group(0)) * multiplier)
    return servings[:m.start()] + scaled + servings[m.end():]


def scale_recipe(recipe: ParsedRecipe, multiplier: float) -> ParsedRecipe:
    """Quantities are scaled as numbers and re-formatted; display strings are never edited."""
    return replace(
        recipe,
        servings=scaled_servings(recipe.servings, multiplier),
        ingredients=[scale_ingredient(i, multiplier) for i in recipe.ingredients],
        steps=list(recipe.steps),
    )
