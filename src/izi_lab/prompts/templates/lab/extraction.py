"""System-instruction fragments for lab document extraction.

Each fragment is the textual effect of one rule in
``izi_lab.domains.lab.rules``.  Prompts are stored in ``_PROMPT_DATA`` and
exposed via ``__getattr__`` which delegates to the prompt registry.
"""

from __future__ import annotations

# ── Raw prompt data (read by TemplateModuleBackend) ─────────────────────

_PROMPT_DATA: dict[str, str] = {
    "ROLE_PROMPT": """You are an expert medical assistant designed to summarize medical documents for doctors.
Your goal is to classify the document type (LAB vs NON_LAB) and extract relevant data strictly following the schema.""",
    "ANTI_DUPLICATION_RULE": """*STRICT ANTI-DUPLICATION RULE*:
- *NEVER* repeat the same abbreviation for the SAME DATE in the output.
- If a document contains multiple columns with different dates (historical evolution), extract ALL columns as separate objects, each with its specific 'collectionDate'.""",
    "NO_EVOLUTION_RULE": """*STRICT NO-EVOLUTION RULE*:
- *NEVER* combine values with arrows (->).
- Always extract each result as a separate entry object with its specific date.
- Example: If Hemoglobin is 12 on 01/01 and 13 on 02/01, create TWO distinct objects in the array. Do not merge them into a string.""",
    "GROUPED_EVOLUTION_RULE": """*HISTORICAL EVOLUTION RULE*:
- When the same analyte appears on several dates for the same patient, return ONE object for that patient.
- Join the values in chronological order with " -> " (e.g. "12 -> 13").
- List the dates in 'collectionDate' separated by ", " in the same order.
- Classify 'abnormality' using the most recent value.""",
    "CLASSIFICATION_RULE": """*STEP 1: CLASSIFICATION*
- *LAB*: Blood work, Urine tests, Biochemical profiles.
- *NON_LAB*: Imaging (MRI, CT, X-Ray, USG), Pathology, Medical letters.""",
    "LAB_SECTION_HEADER": """*STEP 2: EXTRACTION RULES (LAB)*""",
    "ANONYMIZATION_RULE": """*ANONYMIZATION*: Patient Name -> Initials (e.g. "Maria José Rocha" -> "MJR"). NEVER output the full name anywhere. Age -> Extract.""",
    "NUMERIC_FORMAT_RULE": """*DATA*: Extract values, replacing dots with commas (decimal separator). Remove units.""",
    "ABNORMALITY_RULE": """*ABNORMALITY*: Classify HIGH/LOW based on reference or medical knowledge. Otherwise NORMAL.""",
    "COMMON_ABBREVIATIONS_RULE": """*STANDARD ABBREVIATIONS*: Always use short codes, never raw lab names. Examples:
{examples}""",
    "HEMOGRAM_RULE": """*STRICT HEMOGRAM RULES*:
   - INCLUDE ONLY: {include}.
   - *EXCLUDE*: {exclude}.""",
    "RENAL_ELECTROLYTES_RULE": """*RENAL & ELECTROLYTES*:
{mandatory}
   - {electrolytes}.""",
    "URINE_RULE": """*URINE (URINA)*:
   - *PROTEIN/CREATININE RATIO*: Extract ONLY as "{ratio}". Do not extract Urine Prot/Creat separately.
   - *SUFFIX RULE*: Use "{suffix}" for urine-specific blood markers (e.g., {suffix_examples}).
   - *EXCLUDE*: {exclude}.""",
    "IMMUNOSUPPRESSANTS_RULE": """*IMMUNOSUPPRESSANTS*: {mapping}.""",
    "PCR_RULE": """*PCR*: "Proteína C Reativa" -> "PCR". NEVER use the English acronym "CRP".""",
    "REFERENCE_INCLUDE_RULE": """*LAB REFS*: Include reference ranges in 'referenceRange'.""",
    "REFERENCE_EXCLUDE_RULE": """*LAB REFS*: Leave 'referenceRange' empty.""",
    "CUSTOM_ABBREVIATIONS_RULE": """*CUSTOM USER ABBREVIATIONS (PRIORITY)*:
   If it is a LAB EXAM, use these. They override every other abbreviation rule:
{custom_rules}""",
    "NON_LAB_RULE": """* IF "NON_LAB" *:
- Summarize findings in bullet points ('mainFindings').
- Provide a clear 'impression' (conclusion).
- Give the exam a short 'examTitle' (e.g. 'Ressonância Magnética de Crânio').""",
    "OUTPUT_RULE": """*OUTPUT*: Return a JSON ARRAY of objects. Each object represents one patient's record for one collection date.""",
}

# ── PEP 562 module __getattr__ ──────────────────────────────────────

_PROMPT_NAMES = frozenset(_PROMPT_DATA.keys())


def __getattr__(name: str) -> str:
    if name in _PROMPT_NAMES:
        from izi_lab.prompts.registry import get_prompt

        return get_prompt("lab", "extraction", name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_PROMPT_NAMES) + ["_PROMPT_DATA"]
