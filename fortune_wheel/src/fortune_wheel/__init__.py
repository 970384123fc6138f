from importlib import resources as _resources

__all__ = [
    "default_palette",
]


def default_palette() -> list[str]:
    """Return the packaged slice colors from assets/palette.txt, in order."""
    text = _resources.files("fortune_wheel").joinpath("assets").joinpath("palette.txt").read_text()
    return [ln.strip() for ln in text.splitlines() if ln.strip()]
