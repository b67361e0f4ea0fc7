PLAINTEXT = "plaintext"

# Tags the browser highlighter is configured for.
LANGUAGES: tuple[str, ...] = (PLAINTEXT, "sql", "powershell", "javascript", "python", "bash")

_LANGUAGE_ALIASES = {
    "bash": "bash",
    "javascript": "javascript",
    "js": "javascript",
    "mjs": "javascript",
    "node": "javascript",
    "plain": PLAINTEXT,
    "plaintext": PLAINTEXT,
    "powershell": "powershell",
    "ps": "powershell",
    "ps1": "powershell",
    "pwsh": "powershell",
    "py": "python",
    "python": "python",
    "python3": "python",
    "sh": "bash",
    "shell": "bash",
    "sql": "sql",
    "text": PLAINTEXT,
    "txt": PLAINTEXT,
    "zsh": "bash",
}


def normalize_language(value: str | None) -> str:
    """Return the canonical tag for *value*.

    Blank input becomes ``plaintext``, known tags and aliases are matched
    case-insensitively, anything else is kept as free text (stripped).
    """
    if value is None:
        return PLAINTEXT
    stripped = value.strip()
    if not stripped:
        return PLAINTEXT
    return _LANGUAGE_ALIASES.get(stripped.lower(), stripped)


def is_highlighted(language: str) -> bool:
    return language.lower() in LANGUAGES
