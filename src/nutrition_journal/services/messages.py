"""Localized user-facing messages.

Languages starting with ``pt`` get Portuguese; everything else falls back to
English.
"""

_MESSAGES: dict[str, dict[str, str]] = {
    "pt": {
        "rate_limit_exceeded": (
            "Você excedeu seu limite de uso de IA. Tente novamente mais tarde."
        ),
        "llm_unavailable": (
            "Não foi possível analisar sua refeição agora. "
            "Tente novamente em alguns instantes."
        ),
        "exercise_llm_unavailable": (
            "Não foi possível analisar seu exercício agora. "
            "Tente novamente em alguns instantes."
        ),
        "scoring_unavailable": (
            "Não foi possível calcular a pontuação do dia agora. "
            "O dia foi fechado mesmo assim."
        ),
        "journal_not_found": "Diário não encontrado.",
        "journal_read_only": "Este diário não pode mais ser editado.",
        "entry_not_found": "Registro não encontrado.",
        "entry_not_analyzed": "Aguarde a análise antes de confirmar este registro.",
        "entry_not_pending": "Este registro não está aguardando análise.",
        "patient_not_found": "Paciente não encontrado.",
        "blank": "{field} não pode ficar em branco",
        "too_long": "{field} é muito longo (máximo: {count} caracteres)",
        "out_of_range": "{field} deve estar entre {low} e {high}",
        "inclusion": "{field} não está incluído na lista",
    },
    "en": {
        "rate_limit_exceeded": (
            "You have exceeded your AI usage limit. Please try again later."
        ),
        "llm_unavailable": (
            "We couldn't analyze your meal right now. Please try again shortly."
        ),
        "exercise_llm_unavailable": (
            "We couldn't analyze your exercise right now. Please try again shortly."
        ),
        "scoring_unavailable": (
            "We couldn't score your day right now. The day was closed anyway."
        ),
        "journal_not_found": "Journal not found.",
        "journal_read_only": "This journal can no longer be edited.",
        "entry_not_found": "Entry not found.",
        "entry_not_analyzed": "Wait for the analysis before confirming this entry.",
        "entry_not_pending": "This entry is not awaiting analysis.",
        "patient_not_found": "Patient not found.",
        "blank": "{field} can't be blank",
        "too_long": "{field} is too long (maximum is {count} characters)",
        "out_of_range": "{field} must be between {low} and {high}",
        "inclusion": "{field} is not included in the list",
    },
}

_FIELD_NAMES: dict[str, dict[str, str]] = {
    "pt": {
        "description": "Descrição",
        "meal_type": "Tipo de refeição",
        "proteins": "Proteínas",
        "carbs": "Carboidratos",
        "fats": "Gorduras",
        "calories": "Calorias",
        "gram_weight": "Peso",
        "duration": "Duração",
        "neat": "NEAT",
        "structured_description": "Descrição estruturada",
        "calories_consumed": "Calorias consumidas",
        "calories_burned": "Calorias gastas",
        "score": "Pontuação",
        "feeling": "Sensação",
    },
    "en": {},
}


def resolve_language(language: str | None) -> str:
    """Map a requested language to a supported one."""
    if language and language.lower().startswith("pt"):
        return "pt"
    return "en"


def translate(key: str, language: str | None, **params: object) -> str:
    """Return the localized message for ``key``."""
    template = _MESSAGES[resolve_language(language)][key]
    return template.format(**params)


def field_name(field: str, language: str | None) -> str:
    """Return a human-readable, localized field name."""
    names = _FIELD_NAMES[resolve_language(language)]
    return names.get(field, field.replace("_", " ").capitalize())
