from pathlib import Path

from receiptvault.extraction.exceptions import ExtractionError

_DEFAULT_PROMPT_PATH = Path(__file__).parent / "prompts" / "extraction_prompt.txt"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the receipt extraction prompt.

    Raises:
        ExtractionError: if the file cannot be read.
    """
    try:
        return (path or _DEFAULT_PROMPT_PATH).read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to load extraction prompt: {exc}") from exc
