"""
Mod Filename Normalizer
=======================
Turns a raw mod filename such as

    [更好的钓鱼]BetterFishing-forge-1.20.1-2.0.0.jar

into the canonical catalog key ``betterfishing.jar``. The stem goes through
a fixed sequence of rewrites:

1. Bracketed annotations (translated display names) are dropped
2. Middle-dot separators are dropped
3. A non-ASCII display-name prefix is trimmed off an ASCII name
4. A leading Minecraft version prefix (``1.12.2-``) is dropped
5. ``for <Loader>`` phrases are dropped
6. Loader names glued to a version get a space (``forge1.20`` -> ``forge 1.20``)
7. Version / loader / release-stage suffixes are peeled off the tail
8. Spaces are collapsed, edge separators trimmed, ASCII letters lowercased

The extension (from the last dot on) never takes part in the rewrite and is
re-attached lowercased. All patterns are ASCII-only; non-ASCII characters are
never case folded.
"""

import re
import string

# ═══════════════════════════════════════════════════════════════
#  Patterns
# ═══════════════════════════════════════════════════════════════

_FLAGS = re.ASCII | re.IGNORECASE

LOADER_NAMES = ("forge", "fabric", "quilt", "neoforge", "rift", "liteloader", "nilloader")
RELEASE_STAGES = ("snapshot", "pre", "rc", "beta", "alpha")
COMMON_TAGS = ("universal", "all")

MIDDLE_DOT = "·"

_BRACKET_RE = re.compile(r"\[[^\]]*\]")
_MC_VERSION_PREFIX_RE = re.compile(r"^\d+\.\d+(?:\.\d+)*[-_]", _FLAGS)
_FOR_LOADER_RE = re.compile(r"\s+for\s+[a-z]+", _FLAGS)
_LOADER_DIGIT_RE = re.compile(r"(" + "|".join(LOADER_NAMES) + r")(\d)", _FLAGS)
_ASCII_LETTER_RE = re.compile(r"[a-z]", _FLAGS)
_SPACE_RUN_RE = re.compile(r" +")

# One separator followed by one removable token, anchored at the end.
# The version branch reads "[._-]S+(?:\.S+)*", which accepts the same strings
# as "(?:[._-]S+)*" (S already contains "_" and "-") without the ambiguous
# nesting that makes a backtracking engine blow up on long tails.
_SUFFIX_RE = re.compile(
    r"[-_+\s.]"
    r"(?:"
    r"v?\d+(?:[._-][0-9a-z_+-]+(?:\.[0-9a-z_+-]+)*)?"
    r"|mc\d+(?:\.\d+)*"
    r"|" + "|".join(LOADER_NAMES) +
    r"|" + "|".join(RELEASE_STAGES) +
    r"|" + "|".join(COMMON_TAGS) +
    r")"
    r"\s*\Z",
    _FLAGS,
)

_EDGE_CHARS = " -_"
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


# ═══════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════

def ascii_lower(text: str) -> str:
    """Lowercase A-Z only; every other character passes through untouched."""
    return text.translate(_ASCII_LOWER)


def split_extension(filename: str) -> tuple[str, str]:
    """Split at the last dot. The extension keeps its dot; no dot means no extension."""
    dot = filename.rfind(".")
    if dot == -1:
        return filename, ""
    return filename[:dot], filename[dot:]


def _strip_brackets(stem: str) -> str:
    stem = _BRACKET_RE.sub("", stem)
    # Unbalanced leftovers ("name[cn", "x]y") carry no name information either.
    return stem.replace("[", "").replace("]", "")


def _trim_mixed_script_prefix(stem: str) -> str:
    last_non_ascii = -1
    for index in range(len(stem) - 1, -1, -1):
        if ord(stem[index]) > 0x7F:
            last_non_ascii = index
            break
    if last_non_ascii == -1 or last_non_ascii == len(stem) - 1:
        return stem
    tail = stem[last_non_ascii + 1:]
    if _ASCII_LETTER_RE.search(tail):
        return tail
    return stem


def _peel_suffixes(stem: str) -> str:
    while True:
        match = _SUFFIX_RE.search(stem)
        if not match:
            return stem
        stem = stem[:match.start()]


def _rewrite_stem(stem: str) -> str:
    stem = _strip_brackets(stem)
    stem = stem.replace(MIDDLE_DOT, "")
    stem = _trim_mixed_script_prefix(stem)
    stem = _MC_VERSION_PREFIX_RE.sub("", stem, count=1)
    stem = _FOR_LOADER_RE.sub("", stem)
    stem = _LOADER_DIGIT_RE.sub(r"\1 \2", stem)
    stem = _peel_suffixes(stem)
    stem = _SPACE_RUN_RE.sub(" ", stem)
    stem = stem.strip(_EDGE_CHARS)
    return ascii_lower(stem)


# ═══════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════

def clean_stem(stem: str) -> str:
    """Run the rewrite pipeline until the stem stops changing.

    A single pass can leave work for another one (trimming a trailing
    separator may expose a version suffix), so the pass is repeated. After
    the first pass no step can lengthen the stem without first shortening it,
    so the loop always terminates.
    """
    while True:
        cleaned = _rewrite_stem(stem)
        if cleaned == stem:
            return cleaned
        stem = cleaned


def normalize_mod_filename(filename: str) -> str:
    """Return the canonical catalog key for a mod filename.

    >>> normalize_mod_filename("JEI-1.16.5-7.7.1.152.jar")
    'jei.jar'
    >>> normalize_mod_filename("Sodium for Fabric 0.5.3.jar")
    'sodium.jar'
    """
    stem, extension = split_extension(filename)
    return clean_stem(stem) + ascii_lower(extension)
