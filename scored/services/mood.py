"""Display bands for daily scores."""

LOW_MAX = 33
MID_MAX = 66

BANDS = {
    "low": {"label": "Challenging day", "color": "#ef4444"},
    "mid": {"label": "Moderate day", "color": "#eab308"},
    "high": {"label": "Great day", "color": "#22c55e"},
}


def band_for(score: int) -> str:
    if score <= LOW_MAX:
        return "low"
    if score <= MID_MAX:
        return "mid"
    return "high"


def describe(score: int) -> dict:
    """Band, label and display color for a score value."""
    band = band_for(score)
    return {"band": band, **BANDS[band]}
