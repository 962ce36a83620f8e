"""
repositories/catalog.py

Fixed catalogs (specialties, Algerian wilayas, known clinic coordinates)
and the Arabic-locale ordering used for every enumeration shown in the UI.

Ordering
--------
``arabic_sorted`` follows the Arabic locale convention: strings written in
Arabic script come first, then everything else; within each group the
Unicode Collation Algorithm (DUCET, via ``pyuca``) decides.  The order is
part of the UI contract, so filters do not reshuffle between renders.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from pyuca import Collator

PREDEFINED_SPECIALTIES: tuple[str, ...] = (
    "أمراض القلب والشرايين",
    "الأمراض الجلدية والتناسلية",
    "طب الأطفال وحديثي الولادة",
    "الطب الباطني والجهاز الهضمي",
    "طب وجراحة العيون",
    "أمراض النساء والتوليد",
    "طب الأنف والأذن والحنجرة",
    "طب العظام والمفاصل",
    "الأمراض الصدرية",
    "طب الأعصاب",
    "الطب النفسي",
    "جراحة عامة",
    "طب الأسنان",
    "العلاج الطبيعي",
    "التغذية العلاجية",
)

ALGERIAN_WILAYAS: tuple[str, ...] = (
    "Adrar", "Chlef", "Laghouat", "Oum El Bouaghi", "Batna", "Béjaïa", "Biskra",
    "Béchar", "Blida", "Bouira", "Tamanrasset", "Tébessa", "Tlemcen", "Tiaret",
    "Tizi Ouzou", "Alger", "Djelfa", "Jijel", "Sétif", "Saïda", "Skikda",
    "Sidi Bel Abbès", "Annaba", "Guelma", "Constantine", "Médéa", "Mostaganem",
    "M'Sila", "Mascara", "Ouargla", "Oran", "El Bayadh", "Illizi", "Bordj Bou Arréridj",
    "Boumerdès", "El Tarf", "Tindouf", "Tissemsilt", "El Oued", "Khenchela",
    "Souk Ahras", "Tipaza", "Mila", "Aïn Defla", "Naâma", "Aïn Témouchent", "Ghardaïa",
    "Relizane", "Timimoun", "Bordj Badji Mokhtar", "Ouled Djellal", "Béni Abbès",
    "In Salah", "In Guezzam", "Touggourt", "Djanet", "El M'Ghair", "El Meniaa",
)

# Location string -> clinic coordinates, until real geocoding exists.
KNOWN_COORDINATES: dict[str, dict[str, float]] = {
    "Alger, Centre": {"lat": 36.7754, "lng": 3.0589},
    "Oran, Sidi El Houari": {"lat": 35.7051, "lng": -0.6491},
    "Constantine, Kasbah": {"lat": 36.3650, "lng": 6.6120},
}

_ARABIC_RANGES = (
    (0x0600, 0x06FF),
    (0x0750, 0x077F),
    (0x08A0, 0x08FF),
    (0xFB50, 0xFDFF),
    (0xFE70, 0xFEFF),
)


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def _is_arabic(text: str) -> bool:
    for ch in text:
        if ch.isspace():
            continue
        code = ord(ch)
        return any(lo <= code <= hi for lo, hi in _ARABIC_RANGES)
    return False


def arabic_sort_key(text: str) -> tuple:
    return (0 if _is_arabic(text) else 1, _collator().sort_key(text))


def arabic_sorted(values: Iterable[str]) -> list[str]:
    """De-duplicate *values* (dropping empties) and sort them Arabic-first."""
    unique = {v.strip() for v in values if v and v.strip()}
    return sorted(unique, key=arabic_sort_key)
