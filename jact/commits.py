"""Which commit a pull-request lookup refers to."""

from collections.abc import Sequence

from jact.models import FileAnnotation


def resolve_commit(
    line_number: int | None,
    annotation: FileAnnotation | None,
    log_selection: Sequence[str] | None = None,
) -> str | None:
    """Return the commit hash in scope, or None.

    A non-negative line number means the request came from an annotated file,
    so the annotation wins over any log selection. Without line context the
    first selected log entry is used.
    """
    has_line = line_number is not None and line_number >= 0
    if not has_line:
        if log_selection:
            return log_selection[0]
        return None

    if annotation is None:
        return None
    return annotation.revision_for_line(line_number)  # type: ignore[arg-type]
