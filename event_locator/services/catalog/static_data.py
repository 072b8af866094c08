"""Bundled country/city dataset used when the remote catalog providers fail."""

from typing import Dict, List

# GeoNames ISO 3166-1 alpha-2 codes for the supported countries
COUNTRY_CODES: Dict[str, str] = {
    "Rwanda": "RW",
    "Kenya": "KE",
    "Uganda": "UG",
    "Tanzania": "TZ",
    "Burundi": "BI",
    "Democratic Republic of the Congo": "CD",
}

STATIC_CITIES: Dict[str, List[str]] = {
    "Rwanda": ["Butare", "Gisenyi", "Gitarama", "Kibuye", "Kigali", "Musanze", "Ruhengeri"],
    "Kenya": ["Eldoret", "Kisumu", "Mombasa", "Nairobi", "Nakuru"],
    "Uganda": ["Entebbe", "Gulu", "Jinja", "Kampala", "Mbale"],
    "Tanzania": ["Arusha", "Dar es Salaam", "Dodoma", "Mwanza", "Zanzibar"],
    "Burundi": ["Bujumbura", "Gitega", "Ngozi", "Rumonge"],
    "Democratic Republic of the Congo": ["Bukavu", "Goma", "Kinshasa", "Lubumbashi"],
}

# Alternative spellings accepted for the same country
COUNTRY_ALIASES: Dict[str, str] = {
    "DR Congo": "Democratic Republic of the Congo",
    "DRC": "Democratic Republic of the Congo",
    "Congo (Kinshasa)": "Democratic Republic of the Congo",
    "United Republic of Tanzania": "Tanzania",
}


def canonical_country(name: str) -> str:
    """Map an alias onto the catalog's country name."""
    name = name.strip()
    return COUNTRY_ALIASES.get(name, name)


def static_cities_for(country: str) -> List[str]:
    """Static city list for one country, empty if unknown."""
    return list(STATIC_CITIES.get(canonical_country(country), []))
