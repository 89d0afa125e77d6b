"""US state names and abbreviations used for jurisdiction labels and topic matching."""

US_STATE_ABBREVIATIONS: dict[str, str] = {
    "alabama": "al",
    "alaska": "ak",
    "arizona": "az",
    "arkansas": "ar",
    "california": "ca",
    "colorado": "co",
    "connecticut": "ct",
    "delaware": "de",
    "district of columbia": "dc",
    "florida": "fl",
    "georgia": "ga",
    "hawaii": "hi",
    "idaho": "id",
    "illinois": "il",
    "indiana": "in",
    "iowa": "ia",
    "kansas": "ks",
    "kentucky": "ky",
    "louisiana": "la",
    "maine": "me",
    "maryland": "md",
    "massachusetts": "ma",
    "michigan": "mi",
    "minnesota": "mn",
    "mississippi": "ms",
    "missouri": "mo",
    "montana": "mt",
    "nebraska": "ne",
    "nevada": "nv",
    "new hampshire": "nh",
    "new jersey": "nj",
    "new mexico": "nm",
    "new york": "ny",
    "north carolina": "nc",
    "north dakota": "nd",
    "ohio": "oh",
    "oklahoma": "ok",
    "oregon": "or",
    "pennsylvania": "pa",
    "rhode island": "ri",
    "south carolina": "sc",
    "south dakota": "sd",
    "tennessee": "tn",
    "texas": "tx",
    "utah": "ut",
    "vermont": "vt",
    "virginia": "va",
    "washington": "wa",
    "west virginia": "wv",
    "wisconsin": "wi",
    "wyoming": "wy",
}

STATE_CODES: frozenset[str] = frozenset(US_STATE_ABBREVIATIONS.values())

# City names and nicknames recognised in topic titles, with the aliases they imply.
CITY_ALIASES: dict[str, tuple[str, ...]] = {
    "sf": ("san francisco", "ca"),
    "san francisco": ("sf", "ca"),
    "nyc": ("new york", "ny"),
    "new york": ("nyc", "ny"),
    "los angeles": ("ca",),
    "oakland": ("ca",),
    "san jose": ("ca",),
    "san diego": ("ca",),
    "sacramento": ("ca",),
    "berkeley": ("ca",),
    "chicago": ("il",),
    "houston": ("tx",),
    "dallas": ("tx",),
    "austin": ("tx",),
    "san antonio": ("tx",),
    "phoenix": ("az",),
    "philadelphia": ("pa",),
    "pittsburgh": ("pa",),
    "seattle": ("wa",),
    "portland": (),
    "boston": ("ma",),
    "miami": ("fl",),
    "tampa": ("fl",),
    "atlanta": ("ga",),
    "detroit": ("mi",),
    "minneapolis": ("mn",),
    "denver": ("co",),
    "baltimore": ("md",),
    "milwaukee": ("wi",),
    "nashville": ("tn",),
    "charlotte": ("nc",),
    "raleigh": ("nc",),
    "las vegas": ("nv",),
    "new orleans": ("la",),
    "honolulu": ("hi",),
    "st louis": ("mo",),
    "kansas city": (),
    "cleveland": ("oh",),
    "columbus": ("oh",),
    "salt lake city": ("ut",),
}


def name_contains_state(name: str, state: str) -> bool:
    """Whether ``name`` already mentions ``state`` by full name or abbreviation."""
    lower_name = name.lower()
    lower_state = state.lower().strip()
    if lower_state and lower_state in lower_name:
        return True
    abbrev = US_STATE_ABBREVIATIONS.get(lower_state)
    if abbrev is None:
        return False
    tokens = lower_name.replace(",", " ").split()
    return abbrev in tokens
