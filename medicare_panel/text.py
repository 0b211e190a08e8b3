"""
Text normalization utilities for state codes and free-text fields.
"""

import re

# State and territory name -> USPS abbreviation
STATE_ABBREVS = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR",
    "california": "CA", "colorado": "CO", "connecticut": "CT", "delaware": "DE",
    "florida": "FL", "georgia": "GA", "hawaii": "HI", "idaho": "ID",
    "illinois": "IL", "indiana": "IN", "iowa": "IA", "kansas": "KS",
    "kentucky": "KY", "louisiana": "LA", "maine": "ME", "maryland": "MD",
    "massachusetts": "MA", "michigan": "MI", "minnesota": "MN", "mississippi": "MS",
    "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK",
    "oregon": "OR", "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC",
    "south dakota": "SD", "tennessee": "TN", "texas": "TX", "utah": "UT",
    "vermont": "VT", "virginia": "VA", "washington": "WA", "west virginia": "WV",
    "wisconsin": "WI", "wyoming": "WY", "district of columbia": "DC",
    "puerto rico": "PR", "guam": "GU", "virgin islands": "VI",
    "american samoa": "AS", "northern mariana islands": "MP",
}

# Reverse lookup
STATE_NAMES = {v: k for k, v in STATE_ABBREVS.items()}


def normalize_whitespace(text: str) -> str:
    """
    Collapse multiple whitespace characters to single spaces and strip.

    Args:
        text: Input text

    Returns:
        Whitespace-normalized text
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def normalize_state(state: str) -> str:
    """
    Normalize a state to its 2-letter abbreviation.

    Args:
        state: State name or abbreviation

    Returns:
        2-letter state abbreviation, or empty string if not recognized
    """
    if not state or not isinstance(state, str):
        return ""

    state_clean = state.strip().upper()

    # Already an abbreviation
    if len(state_clean) == 2 and state_clean in STATE_NAMES:
        return state_clean

    # Full name
    return STATE_ABBREVS.get(normalize_whitespace(state).lower(), "")


def parse_state_list(value: str) -> list[str]:
    """
    Parse a comma-separated list of state names or abbreviations.

    Raises:
        ValueError: If an entry is not a recognized state
    """
    states = []
    for item in value.split(","):
        if not item.strip():
            continue
        abbrev = normalize_state(item)
        if not abbrev:
            raise ValueError(f"Unrecognized state: '{item.strip()}'")
        if abbrev not in states:
            states.append(abbrev)
    return states
