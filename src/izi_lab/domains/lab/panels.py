"""Panel inclusion/exclusion lists and mandatory synonyms.

These tables feed both the extraction instructions and the deterministic
post-processing in ``izi_lab.normalization``, so what the model is told and
what is enforced afterwards never drift apart.
"""

from __future__ import annotations

import re
import unicodedata

PLATELETS = "Plaq"

HEMOGRAM_INCLUDE: tuple[str, ...] = (
    "Hb", "Ht", "VCM", "CHCM", "RDW", "Leuco", "Neutro", "Bast",
    "Segmentados", "Eosi", "Baso", "Linfo", "Mono", PLATELETS,
)
HEMOGRAM_EXCLUDE: tuple[str, ...] = ("VPM", "MPV")
# Older reports and models spell platelets "Plq"; only PLATELETS is emitted.
HEMOGRAM_SYNONYMS: dict[str, str] = {
    "Plaquetas": PLATELETS,
    "Platelets": PLATELETS,
    "Plq": PLATELETS,
}

RENAL_SYNONYMS: dict[str, str] = {
    "Ureia": "Ur",
    "Creatinina": "Cr",
}

ELECTROLYTE_SYNONYMS: dict[str, str] = {
    "Sodium": "Na",
    "Sódio": "Na",
    "Potassium": "K",
    "Potássio": "K",
    "Phosphorus": "P",
    "Fósforo": "P",
    "Magnesium": "Mg",
    "Magnésio": "Mg",
    "Calcium": "Ca",
    "Cálcio": "Ca",
}

IMMUNOSUPPRESSANTS: dict[str, str] = {
    "Tacrolimus": "Fk",
    "Sirolimus": "Srl",
    "Ciclosporina": "Csa",
    "Everolimus": "Evr",
}

# "PCR" is the Portuguese acronym; the English "CRP" must never be rendered.
PCR_SYNONYMS: dict[str, str] = {
    "Proteína C Reativa": "PCR",
    "Proteina C-Reativa": "PCR",
    "CRP": "PCR",
    "C-Reactive Protein": "PCR",
}

URINE_RATIO = "P/CrU"
URINE_RATIO_SYNONYMS: tuple[str, ...] = (
    "Relação Proteína/Creatinina",
    "Relação Proteína/Creatinina Urinária",
    "RPC",
    "UPCR",
    "P/Cr U",
    "Prot/Cr U",
    "Prot/Creat U",
)
# Separate urine protein and urine creatinine entries collapse into P/CrU.
URINE_RATIO_COMPONENTS: tuple[str, ...] = (
    "Prot U", "Prot-U", "Proteína U", "Proteínas U", "Cr U", "Creat U", "Creatinina U",
)
URINE_SUFFIX = " U"
URINE_SUFFIX_EXAMPLES: tuple[str, ...] = ("Leuco U", "H U", "Glic U")
URINE_EXCLUDE: tuple[str, ...] = (
    "Eritr", "Eritr U", "Eritrócitos U", "Bili U", "Urob U",
    "Ác. Ascórbico", "Ácido Ascórbico", "Ascorbic Acid",
)

MANDATORY_SYNONYMS: dict[str, str] = {
    **HEMOGRAM_SYNONYMS,
    **RENAL_SYNONYMS,
    **ELECTROLYTE_SYNONYMS,
    **IMMUNOSUPPRESSANTS,
    **PCR_SYNONYMS,
    **{name: URINE_RATIO for name in URINE_RATIO_SYNONYMS},
}

EXCLUDED_ABBREVIATIONS: tuple[str, ...] = HEMOGRAM_EXCLUDE + URINE_EXCLUDE

_WS_RE = re.compile(r"\s+")


def canonical_key(text: str) -> str:
    """Accent-, case- and whitespace-insensitive lookup key."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WS_RE.sub(" ", stripped).strip().casefold()


_SYNONYM_INDEX: dict[str, str] = {canonical_key(k): v for k, v in MANDATORY_SYNONYMS.items()}
_EXCLUDED_INDEX: frozenset[str] = frozenset(canonical_key(a) for a in EXCLUDED_ABBREVIATIONS)
_RATIO_COMPONENT_INDEX: frozenset[str] = frozenset(canonical_key(a) for a in URINE_RATIO_COMPONENTS)


def resolve_synonym(abbreviation: str) -> str:
    """Map a raw or English name to its mandatory short code, if one exists."""
    return _SYNONYM_INDEX.get(canonical_key(abbreviation), abbreviation)


def is_excluded(abbreviation: str) -> bool:
    return canonical_key(abbreviation) in _EXCLUDED_INDEX


def is_urine_ratio_component(abbreviation: str) -> bool:
    return canonical_key(abbreviation) in _RATIO_COMPONENT_INDEX
