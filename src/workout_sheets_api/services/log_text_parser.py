"""
Rule-based workout log parser.

Deterministic, offline implementation of the extraction rules for logs
written in the usual notebook layout:

    PUSH 13/02/2026
    - Calentamiento
    Bici fija 10 min
    - Pecho
    Press banca con barra (aprox con barra 0x15, 8x5) 20x10(+10x10 sin descanso), 22.5x8
    - Hombros
    Press militar con mancuernas 8kgx10, 10x8
    * Next session is tomorrow

- The first line holds the title and the date.
- Lines starting with "-" (or ending with ":") are section headings; they
  become muscle groups unless they name a warm-up, cardio or stretching block,
  in which case the whole section is skipped.
- Lines with "weight x reps" notation are exercises, matched against the
  library; parenthesized approach sets are dropped and "(+AxB ...)" drop
  annotations become extra sets.
- Everything else ends up in the notes.

Weights are normalized by the matched entry's equipment (see
``normalize_weight``).
"""

import json
import logging
import re
import unicodedata
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from workout_sheets_api.models import PrefabExercise, WorkoutSet
from workout_sheets_api.services.interpreter_base import ExtractionRequest, StructuredTextInterpreter
from workout_sheets_api.utils import parse_number

logger = logging.getLogger(__name__)


class EquipmentClass(str, Enum):
    """How a recorded weight relates to the total load"""
    BARBELL = "barbell"        # Recorded per side
    DUMBBELL = "dumbbell"      # Recorded per hand
    MACHINE = "machine"        # Recorded as total (machines, cables, pulleys)
    BODYWEIGHT = "bodyweight"  # Recorded as added load


# Checked in this order: "barra con mancuernas" style names are dumbbell work
_EQUIPMENT_KEYWORDS: List[Tuple[EquipmentClass, re.Pattern]] = [
    (EquipmentClass.DUMBBELL, re.compile(r'\b(mancuernas?|dumbbells?|db)\b')),
    (EquipmentClass.MACHINE, re.compile(r'\b(maquinas?|machines?|poleas?|pulleys?|cables?|smith)\b')),
    (EquipmentClass.BARBELL, re.compile(r'\b(barras?|barbells?|bar|ez)\b')),
    (EquipmentClass.BODYWEIGHT, re.compile(
        r'\b(peso corporal|bodyweight|body weight|kettlebells?|pesa rusa|ninguno|none)\b'
    )),
]

# "17.5x10", "8kgx10", "12,5 x 8"
SET_PATTERN = re.compile(r'(\d+(?:[.,]\d+)?)\s*(?:kg)?\s*[xX×]\s*(\d+)')
PAREN_PATTERN = re.compile(r'\(([^()]*)\)')

# Heading date: 13/02/2026, 13-02-26, 13.02.2026 or 2026-02-13
DMY_DATE_PATTERN = re.compile(r'\b(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{2,4})\b')
ISO_DATE_PATTERN = re.compile(r'\b(\d{4})-(\d{1,2})-(\d{1,2})\b')
# Heading date without a year: 17/12 or 17-12
DAY_MONTH_PATTERN = re.compile(r'\b(\d{1,2})[/.\-](\d{1,2})\b(?![/.\-]\d)')

HEADING_PATTERN = re.compile(r'^\s*[-•–]\s*(.+?)\s*:?\s*$')
COLON_HEADING_PATTERN = re.compile(r'^\s*([^\d:]+?)\s*:\s*$')
NOTE_PATTERN = re.compile(r'^\s*\*+\s*(.*)$')

SKIPPED_SECTION_PATTERN = re.compile(
    r'\b(calentamiento|warm\s*-?\s*up|estiramientos?|stretch(ing)?|bici(cleta)?( fija)?|bike|'
    r'cardio|aerobicos?|aerobic|movimientos aerobicos|movilidad|mobility|cool\s*-?\s*down)\b'
)

_STOPWORDS = {
    "con", "de", "del", "en", "el", "la", "los", "las", "al", "y", "a", "un", "una",
    "with", "the", "on", "of", "and", "in", "at",
}


def _fold(text: str) -> str:
    """Lowercase and strip accents."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def _stem(token: str) -> str:
    if len(token) > 4:
        for suffix in ("es", "as", "os", "s", "a", "o"):
            if token.endswith(suffix):
                return token[: -len(suffix)]
    return token


def _tokens(text: str) -> set:
    words = re.findall(r'[a-z0-9]+', _fold(text))
    return {_stem(w) for w in words if w not in _STOPWORDS}


# ---------------------------------------------------------------------------
# Weight policy
# ---------------------------------------------------------------------------

def classify_equipment(text: str) -> EquipmentClass:
    """Classify free-text equipment; anything unrecognized is treated as total load."""
    folded = _fold(text or "")
    for equipment_class, pattern in _EQUIPMENT_KEYWORDS:
        if pattern.search(folded):
            return equipment_class
    return EquipmentClass.MACHINE


def normalize_weight(recorded: float, equipment_class: EquipmentClass) -> float:
    """Convert a recorded weight to the load stored in the log."""
    if equipment_class == EquipmentClass.BARBELL:
        return recorded * 2
    return recorded


# ---------------------------------------------------------------------------
# Set notation
# ---------------------------------------------------------------------------

def _expand_parentheses(text: str) -> str:
    """Drop parenthesized remarks, keeping "(+AxB ...)" drop annotations as sets."""

    def replace(match: re.Match) -> str:
        inner = match.group(1).strip()
        if inner.startswith("+"):
            return " , " + inner[1:] + " "
        return " "

    previous = None
    while previous != text:
        previous = text
        text = PAREN_PATTERN.sub(replace, text)
    return text


def parse_set_notation(text: str) -> List[WorkoutSet]:
    """Parse "weight x reps" sets in written order, as recorded (not normalized).

    "20x10(+10x10 no rest)" gives two sets, (20, 10) then (10, 10).
    """
    sets = []
    for match in SET_PATTERN.finditer(_expand_parentheses(text)):
        weight = parse_number(match.group(1).replace(",", ".")) or 0
        sets.append(WorkoutSet(weight=weight, reps=int(match.group(2))))
    return sets


def split_exercise_line(line: str) -> Tuple[str, List[WorkoutSet]]:
    """Split an exercise line into the written name and its sets."""
    cleaned = _expand_parentheses(line)
    first = SET_PATTERN.search(cleaned)
    if not first:
        return line.strip(), []
    name = cleaned[: first.start()].strip(" \t:-–,")
    return re.sub(r'\s+', ' ', name), parse_set_notation(cleaned[first.start():])


# ---------------------------------------------------------------------------
# Library matching
# ---------------------------------------------------------------------------

def match_library_exercise(
    phrase: str, library: Sequence[PrefabExercise]
) -> Optional[PrefabExercise]:
    """Pick the library entry that best matches a written exercise name.

    Name words weigh double; equipment and form words break ties between
    variants of the same movement. Returns None when no name word matches.
    """
    folded = _fold(phrase).strip()
    for entry in library:
        if _fold(entry.name).strip() == folded:
            return entry

    phrase_tokens = _tokens(phrase)
    if not phrase_tokens:
        return None

    best: Optional[PrefabExercise] = None
    best_score: Tuple[int, float] = (0, 0.0)
    for entry in library:
        name_tokens = _tokens(entry.name)
        name_hits = len(phrase_tokens & name_tokens)
        if not name_hits:
            continue
        detail_hits = len(phrase_tokens & (_tokens(entry.equipment) | _tokens(entry.form)) - name_tokens)
        score = 2 * name_hits + detail_hits
        coverage = name_hits / len(name_tokens | phrase_tokens)
        if (score, coverage) > best_score:
            best, best_score = entry, (score, coverage)
    return best


# ---------------------------------------------------------------------------
# Whole log
# ---------------------------------------------------------------------------

def _most_recent(day: int, month: int, today: date) -> date:
    """Latest date on or before ``today`` falling on day/month."""
    # Leap days can be up to eight years back
    for year in range(today.year, today.year - 9, -1):
        try:
            candidate = date(year, month, day)
        except ValueError:
            continue
        if candidate <= today:
            return candidate
    raise ValueError(f"No such day: {day}/{month}")


def _parse_heading(line: str, today: Optional[date] = None) -> Tuple[str, str]:
    """Return (title, ISO date) from the first line of a log.

    A day/month heading date without a year is taken as its most recent
    occurrence up to ``today``.
    """
    iso = ISO_DATE_PATTERN.search(line)
    dmy = DMY_DATE_PATTERN.search(line)
    day_month = DAY_MONTH_PATTERN.search(line)
    date_text = ""
    match = iso or dmy or day_month
    if match:
        try:
            if iso:
                year, month, day = (int(g) for g in iso.groups())
            elif dmy:
                day, month, year = (int(g) for g in dmy.groups())
                if year < 100:
                    year += 2000
            else:
                day, month = (int(g) for g in day_month.groups())
                year = _most_recent(day, month, today or date.today()).year
            date_text = datetime(year, month, day).strftime("%Y-%m-%d")
        except ValueError:
            logger.warning(f"Unreadable date in log heading: {line!r}")
        line = line[: match.start()] + line[match.end():]
    title = re.sub(r'\s+', ' ', line).strip(" \t-–:|,")
    return title, date_text


def _section_heading(line: str) -> Optional[str]:
    if SET_PATTERN.search(_expand_parentheses(line)):
        return None
    m = HEADING_PATTERN.match(line) or COLON_HEADING_PATTERN.match(line)
    return m.group(1).strip() if m else None


def parse_workout_log(
    text: str, library: Sequence[PrefabExercise], today: Optional[date] = None
) -> Dict[str, Any]:
    """Parse a log into a dict shaped like the extraction schema."""
    lines = [line.rstrip() for line in text.strip().splitlines()]
    lines = [line for line in lines if line.strip()]
    if not lines:
        return {}

    title, date_text = _parse_heading(lines[0], today)
    muscle_groups: List[str] = []
    exercises: List[Dict[str, Any]] = []
    notes: List[str] = []
    skipping = False

    for line in lines[1:]:
        note = NOTE_PATTERN.match(line)
        if note:
            notes.append(note.group(1).strip())
            continue

        heading = _section_heading(line)
        if heading is not None:
            skipping = bool(SKIPPED_SECTION_PATTERN.search(_fold(heading)))
            if not skipping and heading not in muscle_groups:
                muscle_groups.append(heading)
            continue

        if skipping:
            continue

        written_name, sets = split_exercise_line(line)
        if not sets:
            notes.append(line.strip())
            continue

        entry = match_library_exercise(written_name, library)
        if entry is None:
            logger.info(f"No library exercise matches '{written_name}', skipping line")
            continue

        equipment_class = classify_equipment(entry.equipment or written_name)
        normalized = [
            {"weight": normalize_weight(s.weight, equipment_class), "reps": s.reps}
            for s in sets
        ]
        existing = next((e for e in exercises if e["name"] == entry.name), None)
        if existing:
            existing["sets"].extend(normalized)
        else:
            exercises.append({"name": entry.name, "sets": normalized})

    result: Dict[str, Any] = {
        "date": date_text,
        "title": title,
        "muscleGroups": muscle_groups,
        "exercises": exercises,
    }
    if notes:
        result["notes"] = "\n".join(notes)
    return result


class RuleBasedInterpreter(StructuredTextInterpreter):
    """Offline interpreter using ``parse_workout_log``."""

    name = "rules"

    def interpret(self, request: ExtractionRequest) -> Optional[str]:
        parsed = parse_workout_log(request.text, request.library)
        if not parsed:
            return None
        return json.dumps(parsed, ensure_ascii=False)
