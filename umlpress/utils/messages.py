"""
User-facing message catalog.

Messages are numbered templates with positional arguments. Numbers are stable so
callers (and tests) can refer to a message without depending on its wording.
"""

from typing import Dict

MESSAGES: Dict[int, str] = {
    5: (
        "Java is not installed or could not be found.\n"
        "Install a Java runtime and make sure it is on PATH, or set PLANTUML_JAVA."
    ),
    6: (
        "PlantUML jar file not found.\n"
        "Download plantuml.jar into {0}, or set PLANTUML_JAR to its location."
    ),
    10: "Error rendering '{0}':\n{1}",
}


def localize(message_id: int, *args) -> str:
    """
    Format a numbered message with positional arguments.

    Raises:
        KeyError: If the message number is not in the catalog
    """
    return MESSAGES[message_id].format(*args)
