"""Utility: static country → continent mapping used for regional rollups.

Areas missing from the table are left out of continent series; they still
count in global series.
"""

CONTINENT_MAP = {
    # Americas
    "United States": "Americas",
    "United States of America": "Americas",
    "Canada": "Americas",
    "Mexico": "Americas",
    "Brazil": "Americas",
    "Argentina": "Americas",
    "Chile": "Americas",
    "Colombia": "Americas",
    "Peru": "Americas",
    # Europe
    "Germany": "Europe",
    "France": "Europe",
    "United Kingdom": "Europe",
    "Italy": "Europe",
    "Spain": "Europe",
    "Poland": "Europe",
    "Netherlands": "Europe",
    "Sweden": "Europe",
    # Asia
    "China": "Asia",
    "India": "Asia",
    "Japan": "Asia",
    "Korea, Rep.": "Asia",
    "South Korea": "Asia",
    "Indonesia": "Asia",
    "Thailand": "Asia",
    "Viet Nam": "Asia",
    "Vietnam": "Asia",
    "Malaysia": "Asia",
    # Africa
    "Egypt, Arab Rep.": "Africa",
    "Egypt": "Africa",
    "Nigeria": "Africa",
    "Kenya": "Africa",
    "South Africa": "Africa",
    # Oceania
    "Australia": "Oceania",
    "New Zealand": "Oceania",
}

CONTINENTS = ("Africa", "Americas", "Asia", "Europe", "Oceania")


def get_continent(area: str) -> str | None:
    """Return the continent for an area name if available.

    Args:
        area: Country or area name as it appears in the source.

    Returns:
        Continent name or ``None`` when unknown.
    """
    return CONTINENT_MAP.get(area.strip())
