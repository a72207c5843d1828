from pathlib import PurePosixPath

LANGUAGE_GUIDANCE = {
    ".js": (
        "JavaScript",
        "Apply JavaScript best practices. Consider variable scoping, function design, and error handling.",
    ),
    ".ts": (
        "TypeScript",
        "Apply TypeScript best practices. Keep type annotations accurate and avoid widening to any.",
    ),
    ".html": (
        "HTML",
        "Follow semantic HTML and accessibility standards. For aria-label requests, add meaningful "
        "descriptions that help screen readers. Preserve existing tag structure and attributes.",
    ),
    ".css": (
        "CSS",
        "Apply CSS best practices while preserving existing selectors and important styles.",
    ),
    ".py": (
        "Python",
        "Follow PEP 8 guidelines and Python best practices for readability and maintainability.",
    ),
    ".java": (
        "Java",
        "Apply Java conventions and consider object-oriented design principles.",
    ),
}

_DEFAULT = ("code", "Keep the change minimal and consistent with the surrounding code.")


def describe_file(file_name: str) -> tuple[str, str]:
    """Return (file type label, language-specific guidance) for a file name."""
    return LANGUAGE_GUIDANCE.get(PurePosixPath(file_name).suffix.lower(), _DEFAULT)
