"""Configuration for the LanguageTool detection strategy.

Rules disabled by default and words that are never reported as misspellings.
"""

# Rules that flag layout rather than writing (can be extended per detector)
DEFAULT_DISABLED_RULES = {
    "WHITESPACE_RULE",
    "CONSECUTIVE_SPACES",
    "SENTENCE_WHITESPACE",
    "COMMA_PARENTHESIS_WHITESPACE",
    "EN_UNPAIRED_BRACKETS",
    "DASH_RULE",
}


# Words to ignore (case-sensitive). Acronyms are also matched in plural form.
DEFAULT_IGNORED_WORDS = {
    # --- Product names ---
    "LinguaPolish", "LanguageTool", "Gemini", "Mistral",

    # --- Common acronyms ---
    "API", "CSV", "HTML", "JSON", "URL", "UI",
}

# ruleIssueType -> issue category
ISSUE_TYPE_MAP = {
    "misspelling": "grammar",
    "grammar": "grammar",
    "inconsistency": "grammar",
    "typographical": "punctuation",
    "whitespace": "punctuation",
    "style": "style",
    "register": "style",
    "locale-violation": "style",
    "duplication": "style",
}
