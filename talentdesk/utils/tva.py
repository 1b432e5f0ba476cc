import unicodedata
from calendar import monthrange
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional


class TypeTVA(str, Enum):
    FRANCE = "FRANCE"
    EU_INTRACOM = "EU_INTRACOM"
    EU_SANS_TVA = "EU_SANS_TVA"
    HORS_EU = "HORS_EU"


MENTIONS_TVA = {
    TypeTVA.FRANCE: (Decimal('20'), "TVA française au taux normal (20 %)"),
    TypeTVA.EU_INTRACOM: (Decimal('0'), "Autoliquidation - article 44 directive 2006/112/CE"),
    TypeTVA.EU_SANS_TVA: (Decimal('20'), "TVA française au taux normal (20 %)"),
    TypeTVA.HORS_EU: (Decimal('0'), "TVA non applicable - article 259-1 du CGI"),
}

# French name -> English names and ISO codes
PAYS_EU_ALIASES = {
    "Allemagne": ["Germany", "DE", "DEU"],
    "Autriche": ["Austria", "AT", "AUT"],
    "Belgique": ["Belgium", "BE", "BEL"],
    "Bulgarie": ["Bulgaria", "BG", "BGR"],
    "Chypre": ["Cyprus", "CY", "CYP"],
    "Croatie": ["Croatia", "HR", "HRV"],
    "Danemark": ["Denmark", "DK", "DNK"],
    "Espagne": ["Spain", "ES", "ESP"],
    "Estonie": ["Estonia", "EE", "EST"],
    "Finlande": ["Finland", "FI", "FIN"],
    "Grèce": ["Greece", "EL", "GR", "GRC"],
    "Hongrie": ["Hungary", "HU", "HUN"],
    "Irlande": ["Ireland", "IE", "IRL"],
    "Italie": ["Italy", "IT", "ITA"],
    "Lettonie": ["Latvia", "LV", "LVA"],
    "Lituanie": ["Lithuania", "LT", "LTU"],
    "Luxembourg": ["LU", "LUX"],
    "Malte": ["Malta", "MT", "MLT"],
    "Pays-Bas": ["Netherlands", "NL", "NLD"],
    "Pologne": ["Poland", "PL", "POL"],
    "Portugal": ["PT", "PRT"],
    "République tchèque": ["Czech Republic", "Czechia", "CZ", "CZE"],
    "Roumanie": ["Romania", "RO", "ROU"],
    "Slovaquie": ["Slovakia", "SK", "SVK"],
    "Slovénie": ["Slovenia", "SI", "SVN"],
    "Suède": ["Sweden", "SE", "SWE"],
}

FRANCE_ALIASES = ["France", "FR", "FRA", "French"]


def _normalize(value: Optional[str]) -> str:
    decomposed = unicodedata.normalize("NFD", (value or "").strip().lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


PAYS_EU_NORMALIZED = {
    _normalize(name)
    for nom_fr, aliases in PAYS_EU_ALIASES.items()
    for name in [nom_fr] + aliases
}
FRANCE_NORMALIZED = {_normalize(name) for name in FRANCE_ALIASES}


def get_type_tva(pays: Optional[str], numero_tva: Optional[str]) -> TypeTVA:
    """VAT regime of a client, an empty country means France"""
    normalized = _normalize(pays)
    if not normalized or normalized in FRANCE_NORMALIZED:
        return TypeTVA.FRANCE
    if normalized in PAYS_EU_NORMALIZED:
        if numero_tva and numero_tva.strip():
            return TypeTVA.EU_INTRACOM
        return TypeTVA.EU_SANS_TVA
    return TypeTVA.HORS_EU


def taux_tva(type_tva: TypeTVA) -> Decimal:
    return MENTIONS_TVA[type_tva][0]


def get_mention_tva(type_tva: TypeTVA, numero_tva_client: Optional[str]) -> str:
    mention = MENTIONS_TVA[type_tva][1]
    if type_tva == TypeTVA.EU_INTRACOM and numero_tva_client and numero_tva_client.strip():
        return f"{mention} - N° TVA client : {numero_tva_client.strip()}"
    return mention


def date_echeance_fin_de_mois(date_document: datetime, delai_jours: int) -> datetime:
    """Due date: document date + delay, then end of that month (15/01 + 30j -> 28/02)"""
    echeance = date_document + timedelta(days=delai_jours)
    dernier_jour = monthrange(echeance.year, echeance.month)[1]
    return echeance.replace(day=dernier_jour)
