def format_hms(seconds: int) -> str:
    """Convert seconds to 'HH:MM:SS'. Hours keep growing past 23."""
    if seconds < 0:
        raise ValueError("seconds must be non-negative")

    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
