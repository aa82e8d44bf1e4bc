"""Physiological categories used to group lab analytes in rendered summaries."""

from __future__ import annotations

from enum import Enum

from izi_lab.domains.lab.panels import PLATELETS


class PhysiologicalCategory(str, Enum):
    """Fixed analyte groups; values are the labels rendered in summaries.

    Declaration order is the rendering order.  ``OTHER`` is the catch-all
    and is rendered without a label.
    """

    HEMOGRAM = "HEMOGRAMA"
    RENAL = "RENAL"
    ELECTROLYTES = "ELETRÓLITOS"
    METABOLIC = "METABÓLICO"
    LIPIDS = "LIPIDOGRAMA"
    HEPATIC = "HEPÁTICO"
    HORMONAL = "HORMONAL"
    INFLAMMATORY = "INFLAMATÓRIO"
    CARDIAC = "CARDÍACO"
    BLOOD_GAS = "GASOMETRIA"
    URINE = "URINA"
    OTHER = "OUTROS"


SYSTEM_CATEGORIES: dict[PhysiologicalCategory, tuple[str, ...]] = {
    PhysiologicalCategory.HEMOGRAM: (
        "Hb", "Ht", "VCM", "HCM", "CHCM", "RDW", "Leuco", "Neutro", "Neut",
        "Bast", "Segmentados", "Linfo", "Linf", "Mono", "Eosi", "Eos", "Baso",
        PLATELETS,
    ),
    PhysiologicalCategory.RENAL: ("Ur", "Cr", "Cist-C"),
    PhysiologicalCategory.ELECTROLYTES: ("Na", "K", "Ca", "Mg", "P", "Cl", "Cálcio Ion"),
    PhysiologicalCategory.METABOLIC: ("Glic", "HbA1c", "Homa-IR", "Insul", "Lac", "Lactato"),
    PhysiologicalCategory.LIPIDS: ("Col-T", "HDL", "LDL", "TG", "VLDL"),
    PhysiologicalCategory.HEPATIC: (
        "TGO", "TGP", "GGT", "FA", "Bil-T", "Bil-D", "Bil-I", "Albumina", "Proteínas",
    ),
    PhysiologicalCategory.HORMONAL: ("TSH", "T4L", "T3", "Vit-D", "Vit-B12", "PTH", "Cortisol"),
    PhysiologicalCategory.INFLAMMATORY: ("PCR", "VHS", "Ferr", "Fibrin", "Proc"),
    PhysiologicalCategory.CARDIAC: ("Trop", "CK-MB", "BNP", "CK"),
    PhysiologicalCategory.BLOOD_GAS: ("pH", "pO2", "pCO2", "HCO3", "BE", "SatO2"),
    PhysiologicalCategory.URINE: (
        "EAS", "Leuco U", "Leuco-U", "H U", "Hem-U", "Glic U", "Prot-U", "P/CrU",
    ),
}

CATEGORY_ORDER: tuple[PhysiologicalCategory, ...] = tuple(PhysiologicalCategory)

_ABBREVIATION_INDEX: dict[str, PhysiologicalCategory] = {
    abbr: category for category, abbrs in SYSTEM_CATEGORIES.items() for abbr in abbrs
}


def get_category(abbreviation: str) -> PhysiologicalCategory:
    """Return the declared category for *abbreviation*, or ``OTHER``.

    Matching is exact: the table holds the normalized abbreviations the
    extraction step is instructed to produce.
    """
    return _ABBREVIATION_INDEX.get(abbreviation, PhysiologicalCategory.OTHER)


# Common analytes and their default short codes, shown to the model as examples.
COMMON_ABBREVIATIONS: dict[str, str] = {
    "Hemoglobina": "Hb",
    "Hematócrito": "Ht",
    "Leucócitos": "Leuco",
    "Plaquetas": PLATELETS,
    "Glicose": "Glic",
    "Ureia": "Ur",
    "Creatinina": "Cr",
    "Sódio": "Na",
    "Potássio": "K",
    "Colesterol Total": "Col-T",
    "HDL": "HDL",
    "LDL": "LDL",
    "Triglicerídeos": "TG",
    "TSH": "TSH",
    "T4 Livre": "T4L",
    "Proteína C Reativa": "PCR",
    "VHS": "VHS",
    "TGO": "TGO",
    "TGP": "TGP",
    "GGT": "GGT",
    "Ferritina": "Ferr",
    "Vitamina B12": "Vit-B12",
    "Vitamina D": "Vit-D",
}
