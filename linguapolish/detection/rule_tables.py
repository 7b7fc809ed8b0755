"""Language-specific literal rule tables for the local issue detector.

Each table maps a language identifier to the literal rules scanned for in
that language. Identifiers are opaque keys; anything without a table of its
own falls back to ``DEFAULT_LANGUAGE``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from linguapolish.config import DEFAULT_LANGUAGE
from linguapolish.models import IssueType


@dataclass(frozen=True)
class LiteralRule:
    """A substring that is always reported when found (case-insensitive)."""

    id: str
    type: IssueType
    pattern: str
    message: str
    suggestions: tuple[str, ...] = field(default_factory=tuple)
    explanation: str | None = None


def _rule(
    rule_id: str,
    issue_type: IssueType,
    pattern: str,
    message: str,
    suggestions: tuple[str, ...],
    explanation: str | None = None,
) -> LiteralRule:
    return LiteralRule(
        id=rule_id,
        type=issue_type,
        pattern=pattern,
        message=message,
        suggestions=suggestions,
        explanation=explanation,
    )


EN_US_RULES = (
    _rule(
        "THEY_WAS",
        IssueType.GRAMMAR,
        "they was",
        "Subject-verb agreement error",
        ("they were",),
        "Use 'were' with plural subjects like 'they'.",
    ),
    _rule(
        "PASSIVE_MISTAKES_MADE",
        IssueType.STYLE,
        "mistakes were made",
        "Passive voice detected",
        ("I made mistakes", "We made mistakes"),
        "Active voice is generally clearer and more direct.",
    ),
    _rule(
        "IN_ORDER_TO",
        IssueType.CLARITY,
        "in order to",
        "Wordy phrase",
        ("to",),
        "Simplify for clearer, more concise writing.",
    ),
    _rule(
        "COMPOUND_SENTENCE_COMMA",
        IssueType.GRAMMAR,
        "I went to the store and I bought milk",
        "Missing comma in compound sentence",
        ("I went to the store, and I bought milk",),
        "Use a comma before coordinating conjunctions that join independent clauses.",
    ),
    _rule(
        "ABSOLUTELY_ESSENTIAL",
        IssueType.STYLE,
        "absolutely essential",
        "Redundant phrase",
        ("essential",),
        "'Essential' already means absolutely necessary.",
    ),
    _rule(
        "COULD_OF",
        IssueType.GRAMMAR,
        "could of",
        "Incorrect verb form",
        ("could have",),
        "'Could of' is a mishearing of 'could've'.",
    ),
    _rule(
        "AT_THIS_POINT_IN_TIME",
        IssueType.CLARITY,
        "at this point in time",
        "Wordy phrase",
        ("now", "currently"),
        "A single word says the same thing.",
    ),
    _rule(
        "VERY_UNIQUE",
        IssueType.STYLE,
        "very unique",
        "Absolute adjective used with an intensifier",
        ("unique",),
        "Something is either unique or it is not.",
    ),
)

EN_GB_RULES = (
    _rule(
        "GB_COLOUR",
        IssueType.GRAMMAR,
        "color",
        "Incorrect spelling for UK English",
        ("colour",),
        "The British spelling uses 'ou' instead of 'o'.",
    ),
    _rule(
        "GB_ORGANISATION",
        IssueType.GRAMMAR,
        "organization",
        "Incorrect spelling for UK English",
        ("organisation",),
        "The British spelling uses 's' instead of 'z'.",
    ),
    _rule(
        "GB_CENTRE",
        IssueType.GRAMMAR,
        "center",
        "Incorrect spelling for UK English",
        ("centre",),
        "The British spelling ends in '-re'.",
    ),
    _rule(
        "GB_FAVOURITE",
        IssueType.GRAMMAR,
        "favorite",
        "Incorrect spelling for UK English",
        ("favourite",),
        "The British spelling uses 'ou' instead of 'o'.",
    ),
)

ES_RULES = (
    _rule(
        "ES_EL_CASA",
        IssueType.GRAMMAR,
        "el casa",
        "Error de concordancia de género",
        ("la casa",),
        "'Casa' es femenino y requiere el artículo 'la'.",
    ),
    _rule(
        "ES_LA_PROBLEMA",
        IssueType.GRAMMAR,
        "la problema",
        "Error de concordancia de género",
        ("el problema",),
        "'Problema' es masculino y requiere el artículo 'el'.",
    ),
    _rule(
        "ES_MAS_MEJOR",
        IssueType.STYLE,
        "más mejor",
        "Comparativo redundante",
        ("mejor",),
        "'Mejor' ya es comparativo.",
    ),
)

FR_RULES = (
    _rule(
        "FR_LE_TABLE",
        IssueType.GRAMMAR,
        "le table",
        "Erreur d'accord de genre",
        ("la table",),
        "'Table' est féminin et nécessite l'article 'la'.",
    ),
    _rule(
        "FR_LA_PROBLEME",
        IssueType.GRAMMAR,
        "la problème",
        "Erreur d'accord de genre",
        ("le problème",),
        "'Problème' est masculin et nécessite l'article 'le'.",
    ),
    _rule(
        "FR_PLUS_MEILLEUR",
        IssueType.STYLE,
        "plus meilleur",
        "Comparatif redondant",
        ("meilleur",),
        "'Meilleur' est déjà un comparatif.",
    ),
)

DE_RULES = (
    _rule(
        "DE_DER_MAEDCHEN",
        IssueType.GRAMMAR,
        "der Mädchen",
        "Falscher Artikel",
        ("das Mädchen",),
        "'Mädchen' ist sächlich.",
    ),
    _rule(
        "DE_WEGEN_DEM",
        IssueType.STYLE,
        "wegen dem",
        "Umgangssprachlicher Kasus nach 'wegen'",
        ("wegen des",),
        "In der Schriftsprache steht 'wegen' mit dem Genitiv.",
    ),
)

PT_RULES = (
    _rule(
        "PT_A_PROBLEMA",
        IssueType.GRAMMAR,
        "a problema",
        "Erro de concordância de gênero",
        ("o problema",),
        "'Problema' é masculino.",
    ),
    _rule(
        "PT_MENAS",
        IssueType.GRAMMAR,
        "menas",
        "Palavra inexistente",
        ("menos",),
        "'Menos' é invariável.",
    ),
)

IT_RULES = (
    _rule(
        "IT_LA_PROBLEMA",
        IssueType.GRAMMAR,
        "la problema",
        "Errore di concordanza di genere",
        ("il problema",),
        "'Problema' è maschile.",
    ),
    _rule(
        "IT_QUAL_E",
        IssueType.PUNCTUATION,
        "qual'è",
        "Apostrofo non necessario",
        ("qual è",),
        "'Qual' è un troncamento e non vuole l'apostrofo.",
    ),
)

RULE_TABLES: dict[str, tuple[LiteralRule, ...]] = {
    "en-us": EN_US_RULES,
    "en-gb": EN_GB_RULES,
    "es": ES_RULES,
    "fr": FR_RULES,
    "de": DE_RULES,
    "pt": PT_RULES,
    "it": IT_RULES,
}


def normalise_language(language: str | None) -> str:
    """Return the lookup key for ``language`` (``en_US`` -> ``en-us``)."""
    return str(language or "").strip().lower().replace("_", "-")


def get_rule_table(language: str | None) -> tuple[LiteralRule, ...]:
    """Return the rules for ``language``.

    Regional variants without their own table use the base language's table
    (``es-mx`` -> ``es``); anything else uses the default table.
    """
    key = normalise_language(language)
    if key in RULE_TABLES:
        return RULE_TABLES[key]
    base = key.split("-", 1)[0]
    if base in RULE_TABLES:
        return RULE_TABLES[base]
    return RULE_TABLES[DEFAULT_LANGUAGE]
